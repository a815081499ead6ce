"""Start, help and menu handlers."""
import logging
from typing import Optional
from telegram import Update
from telegram.ext import ContextTypes
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.bot import texts
from plantcare.bot.handlers.common import delete_message, send_main_menu, send_text
from plantcare.core.database import AsyncSessionLocal
from plantcare.core.exceptions import UserNotFoundError
from plantcare.models import Step, Temporary
from plantcare.services import UserService, TemporaryService

logger = logging.getLogger(__name__)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle /start command.
    Registers the user on first contact and shows the main menu.
    """
    try:
        telegram_user = update.effective_user

        async with AsyncSessionLocal() as db:
            await UserService.save_user(
                db,
                telegram_id=telegram_user.id,
                firstname=telegram_user.first_name,
                lastname=telegram_user.last_name,
                username=telegram_user.username,
                is_bot=telegram_user.is_bot
            )

            temp = await TemporaryService.get_user_temporary(db, telegram_user.id)
            previous_message_id = temp.message_id
            await TemporaryService.reset_temporary(db, telegram_user.id)

            await delete_message(context, update.effective_chat.id, update.message.message_id)
            await send_main_menu(
                update,
                context,
                db,
                text=texts.START_TEXT,
                previous_message_id=previous_message_id
            )
    except Exception as e:
        logger.error(f"Error in start_command: {e}", exc_info=True)
        await send_text(update, context, texts.GENERIC_ERROR)


async def menu_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /menu command."""
    try:
        async with AsyncSessionLocal() as db:
            temp = await TemporaryService.get_user_temporary(db, update.effective_user.id)
            previous_message_id = temp.message_id
            await TemporaryService.reset_temporary(db, update.effective_user.id, step=Step.MAIN_MENU)

            await delete_message(context, update.effective_chat.id, update.message.message_id)
            await send_main_menu(update, context, db, previous_message_id=previous_message_id)
    except UserNotFoundError:
        await update.message.reply_text(texts.NOT_REGISTERED)
    except Exception as e:
        logger.error(f"Error in menu_command: {e}", exc_info=True)
        await send_text(update, context, texts.GENERIC_ERROR)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    try:
        await update.message.reply_text(texts.HELP_TEXT)
    except Exception as e:
        logger.error(f"Error in help_command: {e}", exc_info=True)
        await update.message.reply_text(texts.GENERIC_ERROR)


async def menu_callback(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    temp: Temporary,
    payload: Optional[str]
) -> Optional[str]:
    """"В меню" button: drop any draft and show the main menu."""
    await TemporaryService.reset_temporary(db, update.effective_user.id, step=Step.MAIN_MENU)
    await send_main_menu(update, context, db)
    return None


async def cancel_callback(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    temp: Temporary,
    payload: Optional[str]
) -> Optional[str]:
    """"Отмена" button: abandon the wizard and return to the start state."""
    await TemporaryService.reset_temporary(db, update.effective_user.id)
    await send_main_menu(update, context, db)
    return None
