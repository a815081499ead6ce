"""Text and photo message handlers."""
import logging
from telegram import Update
from telegram.ext import ContextTypes
from plantcare.bot import texts
from plantcare.bot.handlers import groups, manage_groups, manage_plants, plants
from plantcare.bot.handlers.common import delete_message, domain_error_text, send_text
from plantcare.core.database import AsyncSessionLocal
from plantcare.core.exceptions import PlantCareError, TemporaryDataError, UserNotFoundError
from plantcare.services import TemporaryService

logger = logging.getLogger(__name__)

# Steps that expect a text reply
TEXT_HANDLERS = {
    **groups.TEXT_HANDLERS,
    **plants.TEXT_HANDLERS,
    **manage_groups.TEXT_HANDLERS,
    **manage_plants.TEXT_HANDLERS,
}

# Steps that expect a photo
PHOTO_HANDLERS = {
    **plants.PHOTO_HANDLERS,
    **manage_plants.PHOTO_HANDLERS,
}


async def dispatch_message(update: Update, context: ContextTypes.DEFAULT_TYPE, handlers: dict, kind: str):
    """
    Route a user message to the handler of the current step.

    The user's message is always removed from the chat so that only the
    bot prompts stay visible. Messages that the current step does not
    expect are dropped silently.
    """
    chat_id = update.effective_chat.id
    telegram_id = update.effective_user.id

    try:
        async with AsyncSessionLocal() as db:
            temp = await TemporaryService.get_user_temporary(db, telegram_id)
            await delete_message(context, chat_id, update.message.message_id)

            handler = handlers.get(temp.current_step)
            if handler is None:
                logger.debug(f"Ignoring {kind} from user {telegram_id} at step {temp.current_step.name}")
                return

            await handler(update, context, db, temp)
    except UserNotFoundError:
        await delete_message(context, chat_id, update.message.message_id)
    except TemporaryDataError as e:
        logger.error(f"Broken scratchpad for user {telegram_id}: {e}", exc_info=True)
        await send_text(update, context, texts.GENERIC_ERROR)
    except PlantCareError as e:
        logger.info(f"{kind.capitalize()} from user {telegram_id} rejected: {e}")
        await send_text(update, context, domain_error_text(e) or texts.GENERIC_ERROR)
    except Exception as e:
        logger.error(f"Error handling {kind} from user {telegram_id}: {e}", exc_info=True)
        await send_text(update, context, texts.GENERIC_ERROR)


async def on_text(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle plain text messages."""
    await dispatch_message(update, context, TEXT_HANDLERS, "text")


async def on_photo(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle photo messages."""
    await dispatch_message(update, context, PHOTO_HANDLERS, "photo")


async def delete_unhandled_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Remove anything else (stickers, documents, unknown commands)."""
    if update.message is None:
        return
    await delete_message(context, update.effective_chat.id, update.message.message_id)
