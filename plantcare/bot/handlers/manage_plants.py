"""Plant management handlers: view, change, move, remove."""
import logging
from typing import Optional
from telegram import Update
from telegram.ext import ContextTypes
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.bot import buttons, texts
from plantcare.bot.handlers.common import replace_prompt, send_main_menu, send_text, text_too_long
from plantcare.bot.handlers.plants import download_photo
from plantcare.core.config import settings
from plantcare.core.exceptions import PlantNotFoundError
from plantcare.models import Plant, Step, Temporary
from plantcare.services import UserService, GroupService, PlantService, TemporaryService
from plantcare.utils.formatting import format_plant_card

logger = logging.getLogger(__name__)

PLANT_FIELDS = [
    ("title", texts.CHANGE_TITLE_BUTTON),
    ("description", texts.CHANGE_DESCRIPTION_BUTTON),
    ("group", texts.CHANGE_GROUP_BUTTON),
    ("photo", texts.CHANGE_PHOTO_BUTTON),
]


async def get_groups_with_plants(db: AsyncSession, user_id: int):
    groups = await GroupService.get_user_groups(db, user_id)
    return [group for group in groups if await PlantService.count_group_plants(db, group.id) > 0]


# ============================================================================
# Prompts
# ============================================================================

async def show_group_plants(update, context, db, group_id: int):
    """Select the scenario and list its plants."""
    group = await TemporaryService.manage_group(db, update.effective_user.id, group_id, step=Step.MANAGE_PLANT)
    plants = await PlantService.get_group_plants(db, group.id)
    await replace_prompt(
        update,
        context,
        db,
        texts.CHOOSE_PLANT.format(title=group.title),
        buttons.plants_keyboard(plants)
    )


async def show_plant_card(update, context, db, plant: Plant, previous_message_id=None):
    group = await GroupService.get_group(db, plant.group_id)
    await replace_prompt(
        update,
        context,
        db,
        texts.PLANT_ACTIONS.format(card=format_plant_card(plant, group.title)),
        buttons.plant_actions_keyboard(),
        photo=plant.photo,
        previous_message_id=previous_message_id
    )


async def reopen_plant_card(update, context, db, plant_id: int, previous_message_id=None):
    """Reload the plant into the scratchpad and show its card."""
    plant = await TemporaryService.manage_plant(db, update.effective_user.id, plant_id)
    await show_plant_card(update, context, db, plant, previous_message_id=previous_message_id)


# ============================================================================
# Callbacks
# ============================================================================

async def show_plant_groups(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    temp: Temporary,
    payload: Optional[str]
) -> Optional[str]:
    """"Управление растениями" button: scenarios that have plants."""
    user = await UserService.get_user_by_telegram_id(db, update.effective_user.id)
    groups = await get_groups_with_plants(db, user.id)
    if not groups:
        raise PlantNotFoundError(f"User {user.id} has no plants")

    await TemporaryService.reset_temporary(db, update.effective_user.id, step=Step.MANAGE_PLANTS_CHOOSE_GROUP)
    await replace_prompt(
        update,
        context,
        db,
        texts.CHOOSE_PLANTS_GROUP,
        buttons.groups_keyboard(groups, with_back=False)
    )
    return None


async def pick_group(update, context, db, temp, payload):
    await show_group_plants(update, context, db, int(payload))


async def pick_plant(update, context, db, temp, payload):
    await reopen_plant_card(update, context, db, int(payload))


async def back_to_plants(update, context, db, temp, payload):
    await show_group_plants(update, context, db, temp.get_plant_draft().group_id)


async def back_to_card(update, context, db, temp, payload):
    await reopen_plant_card(update, context, db, temp.get_plant_draft().id)


async def change_plant(update, context, db, temp, payload):
    draft = temp.get_plant_draft()
    group = await GroupService.get_group(db, draft.group_id)
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.MANAGE_PLANT_CHANGE)
    await replace_prompt(
        update,
        context,
        db,
        texts.CHOOSE_PLANT_FIELD.format(card=format_plant_card(draft, group.title)),
        buttons.fields_keyboard(PLANT_FIELDS)
    )


async def back_to_fields(update, context, db, temp, payload):
    await change_plant(update, context, db, temp, payload)


async def remove_plant(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.MANAGE_PLANT_REMOVAL)
    await replace_prompt(
        update,
        context,
        db,
        texts.CONFIRM_PLANT_REMOVAL.format(title=temp.get_plant_draft().title),
        buttons.removal_keyboard()
    )


async def confirm_plant_removal(update, context, db, temp, payload):
    draft = temp.get_plant_draft()
    await PlantService.delete_plant(db, draft.id)
    await TemporaryService.reset_temporary(db, update.effective_user.id, step=Step.MAIN_MENU)
    await send_main_menu(update, context, db, text=texts.PLANT_REMOVED.format(title=draft.title))


async def choose_field(update, context, db, temp, payload):
    """Prompt for the new value of the chosen field."""
    if payload == "title":
        await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.CHANGE_PLANT_TITLE)
        await replace_prompt(
            update, context, db,
            texts.CHANGE_PLANT_TITLE.format(max_length=settings.title_max_length),
            buttons.navigation_keyboard()
        )
    elif payload == "description":
        await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.CHANGE_PLANT_DESCRIPTION)
        await replace_prompt(update, context, db, texts.CHANGE_PLANT_DESCRIPTION, buttons.navigation_keyboard())
    elif payload == "group":
        draft = temp.get_plant_draft()
        groups = [
            group for group in await GroupService.get_user_groups(db, draft.user_id)
            if group.id != draft.group_id
        ]
        if not groups:
            return texts.NO_OTHER_GROUPS

        await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.CHANGE_PLANT_GROUP)
        await replace_prompt(update, context, db, texts.CHANGE_PLANT_GROUP, buttons.groups_keyboard(groups))
    elif payload == "photo":
        await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.CHANGE_PLANT_PHOTO)
        await replace_prompt(update, context, db, texts.CHANGE_PLANT_PHOTO, buttons.navigation_keyboard())
    else:
        raise ValueError(f"Unknown plant field: {payload}")
    return None


async def change_plant_group(update, context, db, temp, payload):
    plant_id = temp.get_plant_draft().id
    await PlantService.update_plant_group(db, plant_id, int(payload))
    await reopen_plant_card(update, context, db, plant_id)
    return texts.PLANT_UPDATED


# ============================================================================
# Text and photo replies
# ============================================================================

async def change_plant_title(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    title = update.message.text.strip()
    if text_too_long(title, settings.title_max_length):
        await send_text(update, context, texts.PLANT_TITLE_TOO_LONG.format(max_length=settings.title_max_length))
        return

    plant_id = temp.get_plant_draft().id
    await PlantService.update_plant_title(db, plant_id, title)
    await reopen_plant_card(update, context, db, plant_id, previous_message_id=previous_message_id)


async def change_plant_description(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    description = update.message.text.strip()
    if text_too_long(description, settings.description_max_length):
        await send_text(update, context, texts.DESCRIPTION_TOO_LONG.format(max_length=settings.description_max_length))
        return

    plant_id = temp.get_plant_draft().id
    await PlantService.update_plant_description(db, plant_id, description)
    await reopen_plant_card(update, context, db, plant_id, previous_message_id=previous_message_id)


async def change_plant_photo(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    photo = await download_photo(update)

    plant_id = temp.get_plant_draft().id
    await PlantService.update_plant_photo(db, plant_id, photo)
    await reopen_plant_card(update, context, db, plant_id, previous_message_id=previous_message_id)


CALLBACKS = {
    (Step.MANAGE_PLANTS_CHOOSE_GROUP, buttons.PICK_GROUP): pick_group,
    (Step.MANAGE_PLANT, buttons.PICK_PLANT): pick_plant,
    (Step.MANAGE_PLANT, buttons.BACK): show_plant_groups,
    (Step.MANAGE_GROUP_SEE_PLANTS, buttons.PICK_PLANT): pick_plant,
    (Step.MANAGE_PLANT_ACTION, buttons.BACK): back_to_plants,
    (Step.MANAGE_PLANT_ACTION, buttons.CHANGE): change_plant,
    (Step.MANAGE_PLANT_ACTION, buttons.REMOVE): remove_plant,
    (Step.MANAGE_PLANT_REMOVAL, buttons.CONFIRM): confirm_plant_removal,
    (Step.MANAGE_PLANT_REMOVAL, buttons.BACK): back_to_card,
    (Step.MANAGE_PLANT_CHANGE, buttons.FIELD): choose_field,
    (Step.MANAGE_PLANT_CHANGE, buttons.BACK): back_to_card,
    (Step.CHANGE_PLANT_TITLE, buttons.BACK): back_to_fields,
    (Step.CHANGE_PLANT_DESCRIPTION, buttons.BACK): back_to_fields,
    (Step.CHANGE_PLANT_GROUP, buttons.PICK_GROUP): change_plant_group,
    (Step.CHANGE_PLANT_GROUP, buttons.BACK): back_to_fields,
    (Step.CHANGE_PLANT_PHOTO, buttons.BACK): back_to_fields,
}

TEXT_HANDLERS = {
    Step.CHANGE_PLANT_TITLE: change_plant_title,
    Step.CHANGE_PLANT_DESCRIPTION: change_plant_description,
}

PHOTO_HANDLERS = {
    Step.CHANGE_PLANT_PHOTO: change_plant_photo,
}
