"""Watering scenario management handlers: view, change, remove, list plants."""
import logging
from typing import Optional
from telegram import Update
from telegram.ext import ContextTypes
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.bot import buttons, texts
from plantcare.bot.date_picker import CAL_DAY
from plantcare.bot.handlers.common import replace_prompt, send_main_menu, send_text, text_too_long
from plantcare.bot.handlers.groups import (
    parse_last_watering_date,
    parse_watering_interval,
    show_calendar_prompt,
)
from plantcare.core.config import settings
from plantcare.core.exceptions import GroupNotFoundError
from plantcare.models import Group, Step, Temporary
from plantcare.services import UserService, GroupService, PlantService, TemporaryService
from plantcare.utils.formatting import format_group_card, format_plants_list

logger = logging.getLogger(__name__)

GROUP_FIELDS = [
    ("title", texts.CHANGE_TITLE_BUTTON),
    ("description", texts.CHANGE_DESCRIPTION_BUTTON),
    ("date", texts.CHANGE_LAST_WATERING_DATE_BUTTON),
    ("interval", texts.CHANGE_WATERING_INTERVAL_BUTTON),
]


# ============================================================================
# Prompts
# ============================================================================

async def show_group_card(update, context, db, group: Group, previous_message_id=None):
    plants_count = await PlantService.count_group_plants(db, group.id)
    await replace_prompt(
        update,
        context,
        db,
        texts.GROUP_ACTIONS.format(card=format_group_card(group, plants_count)),
        buttons.group_actions_keyboard(has_plants=plants_count > 0),
        previous_message_id=previous_message_id
    )


async def reopen_group_card(update, context, db, group_id: int, previous_message_id=None):
    """Reload the scenario into the scratchpad and show its card."""
    group = await TemporaryService.manage_group(db, update.effective_user.id, group_id)
    await show_group_card(update, context, db, group, previous_message_id=previous_message_id)


async def show_fields_prompt(update, context, db, group_id: int):
    group = await GroupService.get_group(db, group_id)
    await replace_prompt(
        update,
        context,
        db,
        texts.CHOOSE_GROUP_FIELD.format(card=format_group_card(group)),
        buttons.fields_keyboard(GROUP_FIELDS)
    )


# ============================================================================
# Callbacks
# ============================================================================

async def show_groups(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    temp: Temporary,
    payload: Optional[str]
) -> Optional[str]:
    """"Управление сценариями полива" button."""
    user = await UserService.get_user_by_telegram_id(db, update.effective_user.id)
    groups = await GroupService.get_user_groups(db, user.id)
    if not groups:
        raise GroupNotFoundError(f"User {user.id} has no groups")

    await TemporaryService.reset_temporary(db, update.effective_user.id, step=Step.MANAGE_GROUP)
    await replace_prompt(update, context, db, texts.CHOOSE_GROUP, buttons.groups_keyboard(groups, with_back=False))
    return None


async def pick_group(update, context, db, temp, payload):
    await reopen_group_card(update, context, db, int(payload))


async def back_to_card(update, context, db, temp, payload):
    await reopen_group_card(update, context, db, temp.get_group_draft().id)


async def change_group(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.MANAGE_GROUP_CHANGE)
    await show_fields_prompt(update, context, db, temp.get_group_draft().id)


async def back_to_fields(update, context, db, temp, payload):
    await change_group(update, context, db, temp, payload)


async def remove_group(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.MANAGE_GROUP_REMOVAL)
    await replace_prompt(
        update,
        context,
        db,
        texts.CONFIRM_GROUP_REMOVAL.format(title=temp.get_group_draft().title),
        buttons.removal_keyboard()
    )


async def confirm_group_removal(update, context, db, temp, payload):
    draft = temp.get_group_draft()
    await GroupService.delete_group(db, draft.id)
    await TemporaryService.reset_temporary(db, update.effective_user.id, step=Step.MAIN_MENU)
    await send_main_menu(update, context, db, text=texts.GROUP_REMOVED.format(title=draft.title))


async def see_plants(update, context, db, temp, payload):
    draft = temp.get_group_draft()
    plants = await PlantService.get_group_plants(db, draft.id)
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.MANAGE_GROUP_SEE_PLANTS)
    await replace_prompt(
        update,
        context,
        db,
        texts.GROUP_PLANTS.format(title=draft.title, plants=format_plants_list(plants)),
        buttons.plants_keyboard(plants)
    )


async def choose_field(update, context, db, temp, payload):
    """Prompt for the new value of the chosen field."""
    if payload == "title":
        await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.CHANGE_GROUP_TITLE)
        await replace_prompt(
            update, context, db,
            texts.CHANGE_GROUP_TITLE.format(max_length=settings.title_max_length),
            buttons.navigation_keyboard()
        )
    elif payload == "description":
        await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.CHANGE_GROUP_DESCRIPTION)
        await replace_prompt(update, context, db, texts.CHANGE_GROUP_DESCRIPTION, buttons.navigation_keyboard())
    elif payload == "date":
        await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.CHANGE_GROUP_LAST_WATERING_DATE)
        await show_calendar_prompt(update, context, db, texts.CHANGE_GROUP_LAST_WATERING_DATE)
    elif payload == "interval":
        await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.CHANGE_GROUP_WATERING_INTERVAL)
        await replace_prompt(
            update, context, db,
            texts.CHANGE_GROUP_WATERING_INTERVAL,
            buttons.watering_interval_keyboard()
        )
    else:
        raise ValueError(f"Unknown group field: {payload}")


async def change_last_watering_date(update, context, db, temp, payload):
    group_id = temp.get_group_draft().id
    await GroupService.update_group_last_watering_date(db, group_id, parse_last_watering_date(payload))
    await reopen_group_card(update, context, db, group_id)
    return texts.GROUP_UPDATED


async def change_watering_interval(update, context, db, temp, payload):
    group_id = temp.get_group_draft().id
    await GroupService.update_group_watering_interval(db, group_id, parse_watering_interval(payload))
    await reopen_group_card(update, context, db, group_id)
    return texts.GROUP_UPDATED


# ============================================================================
# Text replies
# ============================================================================

async def change_group_title(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    title = update.message.text.strip()
    if text_too_long(title, settings.title_max_length):
        await send_text(update, context, texts.GROUP_TITLE_TOO_LONG.format(max_length=settings.title_max_length))
        return

    group_id = temp.get_group_draft().id
    await GroupService.update_group_title(db, group_id, title)
    await reopen_group_card(update, context, db, group_id, previous_message_id=previous_message_id)


async def change_group_description(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    description = update.message.text.strip()
    if text_too_long(description, settings.description_max_length):
        await send_text(update, context, texts.DESCRIPTION_TOO_LONG.format(max_length=settings.description_max_length))
        return

    group_id = temp.get_group_draft().id
    await GroupService.update_group_description(db, group_id, description)
    await reopen_group_card(update, context, db, group_id, previous_message_id=previous_message_id)


CALLBACKS = {
    (Step.MANAGE_GROUP, buttons.PICK_GROUP): pick_group,
    (Step.MANAGE_GROUP, buttons.BACK): show_groups,
    (Step.MANAGE_GROUP_ACTION, buttons.BACK): show_groups,
    (Step.MANAGE_GROUP_ACTION, buttons.CHANGE): change_group,
    (Step.MANAGE_GROUP_ACTION, buttons.REMOVE): remove_group,
    (Step.MANAGE_GROUP_ACTION, buttons.SEE_PLANTS): see_plants,
    (Step.MANAGE_GROUP_REMOVAL, buttons.CONFIRM): confirm_group_removal,
    (Step.MANAGE_GROUP_REMOVAL, buttons.BACK): back_to_card,
    (Step.MANAGE_GROUP_CHANGE, buttons.FIELD): choose_field,
    (Step.MANAGE_GROUP_CHANGE, buttons.BACK): back_to_card,
    (Step.MANAGE_GROUP_SEE_PLANTS, buttons.BACK): back_to_card,
    (Step.CHANGE_GROUP_TITLE, buttons.BACK): back_to_fields,
    (Step.CHANGE_GROUP_DESCRIPTION, buttons.BACK): back_to_fields,
    (Step.CHANGE_GROUP_LAST_WATERING_DATE, CAL_DAY): change_last_watering_date,
    (Step.CHANGE_GROUP_LAST_WATERING_DATE, buttons.BACK): back_to_fields,
    (Step.CHANGE_GROUP_WATERING_INTERVAL, buttons.INTERVAL): change_watering_interval,
    (Step.CHANGE_GROUP_WATERING_INTERVAL, buttons.BACK): back_to_fields,
}

TEXT_HANDLERS = {
    Step.CHANGE_GROUP_TITLE: change_group_title,
    Step.CHANGE_GROUP_DESCRIPTION: change_group_description,
}
