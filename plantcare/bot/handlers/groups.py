"""Watering scenario creation wizard handlers."""
import logging
from typing import Optional
from telegram import Update
from telegram.ext import ContextTypes
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.bot import buttons, texts
from plantcare.bot.date_picker import CAL_DAY, parse_day
from plantcare.bot.handlers.common import replace_prompt, send_text, text_too_long
from plantcare.core.config import settings
from plantcare.core.exceptions import GroupsLimitExceededError
from plantcare.models import Step, Temporary, GroupDraft
from plantcare.services import UserService, GroupService, TemporaryService
from plantcare.utils.formatting import EMPTY_DESCRIPTION, format_group_draft
from plantcare.utils.time import get_local_time, local_date_to_datetime

logger = logging.getLogger(__name__)


# ============================================================================
# Prompts
# ============================================================================

async def show_title_prompt(update, context, db, previous_message_id=None):
    await replace_prompt(
        update,
        context,
        db,
        texts.ADD_GROUP_TITLE.format(max_length=settings.title_max_length),
        buttons.navigation_keyboard(with_back=False),
        previous_message_id=previous_message_id
    )


async def show_description_prompt(update, context, db, draft: GroupDraft, previous_message_id=None):
    await replace_prompt(
        update,
        context,
        db,
        texts.ADD_GROUP_DESCRIPTION.format(title=draft.title),
        buttons.skip_keyboard(),
        previous_message_id=previous_message_id
    )


async def show_calendar_prompt(update, context, db, text: str, previous_message_id=None):
    today = get_local_time().date()
    await replace_prompt(
        update,
        context,
        db,
        text,
        buttons.calendar_keyboard(today.year, today.month, today),
        previous_message_id=previous_message_id
    )


async def show_interval_prompt(update, context, db, text: str):
    await replace_prompt(update, context, db, text, buttons.watering_interval_keyboard())


def parse_watering_interval(payload: Optional[str]) -> int:
    days = int(payload)
    if days not in buttons.WATERING_INTERVALS:
        raise ValueError(f"Unexpected watering interval: {payload}")
    return days


def parse_last_watering_date(payload: Optional[str]):
    """Calendar payload as local midnight; future days are rejected."""
    day = parse_day(payload)
    if day > get_local_time().date():
        raise ValueError(f"Last watering date {day} is in the future")
    return local_date_to_datetime(day)


# ============================================================================
# Callbacks
# ============================================================================

async def start_create_group(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    temp: Temporary,
    payload: Optional[str]
) -> Optional[str]:
    """"Добавить сценарий полива" button."""
    user = await UserService.get_user_by_telegram_id(db, update.effective_user.id)
    if await GroupService.count_user_groups(db, user.id) >= settings.groups_per_user_limit:
        raise GroupsLimitExceededError(f"User {user.id} reached the groups limit")

    await TemporaryService.reset_temporary(db, update.effective_user.id, step=Step.ADD_GROUP_TITLE)
    await show_title_prompt(update, context, db)
    return None


async def back_to_title(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_GROUP_TITLE)
    await show_title_prompt(update, context, db)


async def skip_description(update, context, db, temp, payload):
    draft = await TemporaryService.add_group_description(db, update.effective_user.id, EMPTY_DESCRIPTION)
    await show_calendar_prompt(
        update, context, db,
        texts.ADD_GROUP_LAST_WATERING_DATE.format(summary=format_group_draft(draft))
    )


async def pick_last_watering_date(update, context, db, temp, payload):
    last_watering_date = parse_last_watering_date(payload)
    draft = await TemporaryService.add_group_last_watering_date(db, update.effective_user.id, last_watering_date)
    await show_interval_prompt(
        update, context, db,
        texts.ADD_GROUP_WATERING_INTERVAL.format(summary=format_group_draft(draft))
    )


async def back_to_description(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_GROUP_DESCRIPTION)
    await show_description_prompt(update, context, db, temp.get_group_draft())


async def pick_watering_interval(update, context, db, temp, payload):
    watering_interval = parse_watering_interval(payload)
    draft = await TemporaryService.add_group_watering_interval(db, update.effective_user.id, watering_interval)
    await replace_prompt(
        update, context, db,
        texts.CONFIRM_ADD_GROUP.format(summary=format_group_draft(draft)),
        buttons.confirm_keyboard()
    )


async def back_to_last_watering_date(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_GROUP_LAST_WATERING_DATE)
    draft = temp.get_group_draft()
    await show_calendar_prompt(
        update, context, db,
        texts.ADD_GROUP_LAST_WATERING_DATE.format(summary=format_group_draft(draft))
    )


async def back_to_watering_interval(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_GROUP_WATERING_INTERVAL)
    draft = temp.get_group_draft()
    await show_interval_prompt(
        update, context, db,
        texts.ADD_GROUP_WATERING_INTERVAL.format(summary=format_group_draft(draft))
    )


async def confirm_add_group(update, context, db, temp, payload):
    group = await TemporaryService.confirm_add_group(db, update.effective_user.id)
    await replace_prompt(
        update, context, db,
        texts.GROUP_CREATED.format(title=group.title),
        buttons.group_created_keyboard()
    )


# ============================================================================
# Text replies
# ============================================================================

async def add_group_title(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    title = update.message.text.strip()
    if text_too_long(title, settings.title_max_length):
        await send_text(update, context, texts.GROUP_TITLE_TOO_LONG.format(max_length=settings.title_max_length))
        return

    draft = await TemporaryService.add_group_title(db, update.effective_user.id, title)
    await show_description_prompt(update, context, db, draft, previous_message_id=previous_message_id)


async def add_group_description(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    description = update.message.text.strip()
    if text_too_long(description, settings.description_max_length):
        await send_text(update, context, texts.DESCRIPTION_TOO_LONG.format(max_length=settings.description_max_length))
        return

    draft = await TemporaryService.add_group_description(db, update.effective_user.id, description)
    await show_calendar_prompt(
        update, context, db,
        texts.ADD_GROUP_LAST_WATERING_DATE.format(summary=format_group_draft(draft)),
        previous_message_id=previous_message_id
    )


CALLBACKS = {
    (Step.ADD_GROUP_DESCRIPTION, buttons.SKIP): skip_description,
    (Step.ADD_GROUP_DESCRIPTION, buttons.BACK): back_to_title,
    (Step.ADD_GROUP_LAST_WATERING_DATE, CAL_DAY): pick_last_watering_date,
    (Step.ADD_GROUP_LAST_WATERING_DATE, buttons.BACK): back_to_description,
    (Step.ADD_GROUP_WATERING_INTERVAL, buttons.INTERVAL): pick_watering_interval,
    (Step.ADD_GROUP_WATERING_INTERVAL, buttons.BACK): back_to_last_watering_date,
    (Step.CONFIRM_ADD_GROUP, buttons.CONFIRM): confirm_add_group,
    (Step.CONFIRM_ADD_GROUP, buttons.BACK): back_to_watering_interval,
}

TEXT_HANDLERS = {
    Step.ADD_GROUP_TITLE: add_group_title,
    Step.ADD_GROUP_DESCRIPTION: add_group_description,
}
