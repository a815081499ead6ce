"""Helpers shared by the bot handlers."""
import logging
from typing import Optional
from telegram import Message, Update
from telegram.error import BadRequest
from telegram.ext import ContextTypes
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.bot import buttons, texts
from plantcare.core.config import settings
from plantcare.core.exceptions import (
    GroupAlreadyExistsError,
    PlantAlreadyExistsError,
    GroupsLimitExceededError,
    PlantsLimitExceededError,
    UserNotFoundError,
    NotFoundError,
    PlantOwnershipError,
)
from plantcare.services import UserService, GroupService, PlantService, TemporaryService

logger = logging.getLogger(__name__)


def domain_error_text(error: Exception) -> Optional[str]:
    """User-visible text for an expected domain error, None for anything else."""
    if isinstance(error, GroupAlreadyExistsError):
        return texts.GROUP_ALREADY_EXISTS
    if isinstance(error, PlantAlreadyExistsError):
        return texts.PLANT_ALREADY_EXISTS
    if isinstance(error, GroupsLimitExceededError):
        return texts.GROUPS_LIMIT_REACHED.format(limit=settings.groups_per_user_limit)
    if isinstance(error, PlantsLimitExceededError):
        return texts.PLANTS_LIMIT_REACHED
    if isinstance(error, UserNotFoundError):
        return texts.NOT_REGISTERED
    if isinstance(error, (NotFoundError, PlantOwnershipError)):
        return texts.NOT_AVAILABLE
    return None


async def delete_message(context: ContextTypes.DEFAULT_TYPE, chat_id: int, message_id: int) -> None:
    """Delete a message, tolerating messages that are already gone."""
    try:
        await context.bot.delete_message(chat_id=chat_id, message_id=message_id)
    except BadRequest as e:
        logger.debug(f"Could not delete message {message_id} in chat {chat_id}: {e}")


async def send_text(update: Update, context: ContextTypes.DEFAULT_TYPE, text: str) -> Message:
    """Send a plain message that is not tracked as a prompt."""
    return await context.bot.send_message(chat_id=update.effective_chat.id, text=text)


async def replace_prompt(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    text: str,
    reply_markup=None,
    photo: Optional[bytes] = None,
    previous_message_id: Optional[int] = None
) -> Message:
    """
    Replace the current prompt with a new one.

    Removes the message whose button was pressed (or the previous prompt
    for text replies), sends the new prompt and stores its ID on the
    user's scratchpad so the next reply can remove it.
    """
    chat_id = update.effective_chat.id

    query = update.callback_query
    if query is not None and query.message is not None:
        await delete_message(context, chat_id, query.message.message_id)
    if previous_message_id:
        await delete_message(context, chat_id, previous_message_id)

    if photo:
        message = await context.bot.send_photo(
            chat_id=chat_id,
            photo=photo,
            caption=text,
            reply_markup=reply_markup
        )
    else:
        message = await context.bot.send_message(
            chat_id=chat_id,
            text=text,
            reply_markup=reply_markup
        )

    await TemporaryService.set_temporary_message(db, update.effective_user.id, message.message_id)
    return message


async def send_main_menu(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    text: str = texts.MENU_TEXT,
    previous_message_id: Optional[int] = None
) -> Message:
    """Show the main menu; management options depend on what the user has."""
    user = await UserService.get_user_by_telegram_id(db, update.effective_user.id)
    groups_count = await GroupService.count_user_groups(db, user.id)
    plants_count = await PlantService.count_user_plants(db, user.id)

    return await replace_prompt(
        update,
        context,
        db,
        text,
        buttons.main_menu_keyboard(groups_count, plants_count),
        previous_message_id=previous_message_id
    )


def text_too_long(value: str, max_length: int) -> bool:
    return len(value) > max_length
