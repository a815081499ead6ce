"""Plant creation wizard handlers."""
import logging
from typing import Optional
from telegram import Update
from telegram.ext import ContextTypes
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.bot import buttons, texts
from plantcare.bot.handlers.common import replace_prompt, send_main_menu, send_text, text_too_long
from plantcare.core.config import settings
from plantcare.core.exceptions import GroupNotFoundError
from plantcare.models import Step, Temporary, PlantDraft
from plantcare.services import UserService, GroupService, TemporaryService
from plantcare.utils.formatting import EMPTY_DESCRIPTION, format_plant_draft

logger = logging.getLogger(__name__)


async def download_photo(update: Update) -> bytes:
    """Download the largest size of the attached photo."""
    photo_file = await update.message.photo[-1].get_file()
    return bytes(await photo_file.download_as_bytearray())


async def plant_summary(db: AsyncSession, draft: PlantDraft) -> str:
    group_title = None
    if draft.group_id is not None:
        group = await GroupService.get_group(db, draft.group_id)
        group_title = group.title
    return format_plant_draft(draft, group_title)


# ============================================================================
# Prompts
# ============================================================================

async def show_title_prompt(update, context, db, previous_message_id=None):
    await replace_prompt(
        update,
        context,
        db,
        texts.ADD_PLANT_TITLE.format(max_length=settings.title_max_length),
        buttons.navigation_keyboard(with_back=False),
        previous_message_id=previous_message_id
    )


async def show_description_prompt(update, context, db, draft: PlantDraft, previous_message_id=None):
    await replace_prompt(
        update,
        context,
        db,
        texts.ADD_PLANT_DESCRIPTION.format(title=draft.title),
        buttons.skip_keyboard(),
        previous_message_id=previous_message_id
    )


async def show_group_prompt(update, context, db, draft: PlantDraft, previous_message_id=None):
    groups = await GroupService.get_user_groups(db, draft.user_id)
    await replace_prompt(
        update,
        context,
        db,
        texts.ADD_PLANT_GROUP.format(summary=await plant_summary(db, draft)),
        buttons.groups_keyboard(groups),
        previous_message_id=previous_message_id
    )


async def show_photo_question(update, context, db, draft: PlantDraft):
    await replace_prompt(
        update,
        context,
        db,
        texts.ADD_PLANT_PHOTO_QUESTION.format(summary=await plant_summary(db, draft)),
        buttons.photo_question_keyboard()
    )


async def show_confirm_prompt(update, context, db, draft: PlantDraft, previous_message_id=None):
    await replace_prompt(
        update,
        context,
        db,
        texts.CONFIRM_ADD_PLANT.format(summary=await plant_summary(db, draft)),
        buttons.confirm_keyboard(),
        photo=draft.photo,
        previous_message_id=previous_message_id
    )


# ============================================================================
# Callbacks
# ============================================================================

async def start_add_plant(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    temp: Temporary,
    payload: Optional[str]
) -> Optional[str]:
    """"Добавить растение" button; a scenario is needed to hold the plant."""
    user = await UserService.get_user_by_telegram_id(db, update.effective_user.id)
    if await GroupService.count_user_groups(db, user.id) == 0:
        raise GroupNotFoundError(f"User {user.id} has no groups to add a plant to")

    await TemporaryService.reset_temporary(db, update.effective_user.id, step=Step.ADD_PLANT_TITLE)
    await show_title_prompt(update, context, db)
    return None


async def back_to_title(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_PLANT_TITLE)
    await show_title_prompt(update, context, db)


async def skip_description(update, context, db, temp, payload):
    draft = await TemporaryService.add_plant_description(db, update.effective_user.id, EMPTY_DESCRIPTION)
    await show_group_prompt(update, context, db, draft)


async def back_to_description(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_PLANT_DESCRIPTION)
    await show_description_prompt(update, context, db, temp.get_plant_draft())


async def pick_group(update, context, db, temp, payload):
    draft = await TemporaryService.add_plant_group(db, update.effective_user.id, int(payload))
    await show_photo_question(update, context, db, draft)


async def back_to_group(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_PLANT_GROUP)
    await show_group_prompt(update, context, db, temp.get_plant_draft())


async def want_photo(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_PLANT_PHOTO)
    await replace_prompt(update, context, db, texts.ADD_PLANT_PHOTO, buttons.navigation_keyboard())


async def without_photo(update, context, db, temp, payload):
    draft = await TemporaryService.add_plant_photo(db, update.effective_user.id, None)
    await show_confirm_prompt(update, context, db, draft)


async def back_to_photo_question(update, context, db, temp, payload):
    await TemporaryService.set_temporary_step(db, update.effective_user.id, Step.ADD_PLANT_PHOTO_QUESTION)
    await show_photo_question(update, context, db, temp.get_plant_draft())


async def confirm_add_plant(update, context, db, temp, payload):
    plant = await TemporaryService.confirm_add_plant(db, update.effective_user.id)
    await send_main_menu(update, context, db, text=texts.PLANT_CREATED.format(title=plant.title))


# ============================================================================
# Text and photo replies
# ============================================================================

async def add_plant_title(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    title = update.message.text.strip()
    if text_too_long(title, settings.title_max_length):
        await send_text(update, context, texts.PLANT_TITLE_TOO_LONG.format(max_length=settings.title_max_length))
        return

    draft = await TemporaryService.add_plant_title(db, update.effective_user.id, title)
    await show_description_prompt(update, context, db, draft, previous_message_id=previous_message_id)


async def add_plant_description(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    description = update.message.text.strip()
    if text_too_long(description, settings.description_max_length):
        await send_text(update, context, texts.DESCRIPTION_TOO_LONG.format(max_length=settings.description_max_length))
        return

    draft = await TemporaryService.add_plant_description(db, update.effective_user.id, description)
    await show_group_prompt(update, context, db, draft, previous_message_id=previous_message_id)


async def add_plant_photo(update: Update, context: ContextTypes.DEFAULT_TYPE, db: AsyncSession, temp: Temporary):
    previous_message_id = temp.message_id
    photo = await download_photo(update)
    draft = await TemporaryService.add_plant_photo(db, update.effective_user.id, photo)
    await show_confirm_prompt(update, context, db, draft, previous_message_id=previous_message_id)


CALLBACKS = {
    (Step.ADD_PLANT_DESCRIPTION, buttons.SKIP): skip_description,
    (Step.ADD_PLANT_DESCRIPTION, buttons.BACK): back_to_title,
    (Step.ADD_PLANT_GROUP, buttons.PICK_GROUP): pick_group,
    (Step.ADD_PLANT_GROUP, buttons.BACK): back_to_description,
    (Step.ADD_PLANT_PHOTO_QUESTION, buttons.PHOTO_YES): want_photo,
    (Step.ADD_PLANT_PHOTO_QUESTION, buttons.PHOTO_NO): without_photo,
    (Step.ADD_PLANT_PHOTO_QUESTION, buttons.BACK): back_to_group,
    (Step.ADD_PLANT_PHOTO, buttons.BACK): back_to_photo_question,
    (Step.CONFIRM_ADD_PLANT, buttons.CONFIRM): confirm_add_plant,
    (Step.CONFIRM_ADD_PLANT, buttons.BACK): back_to_photo_question,
}

TEXT_HANDLERS = {
    Step.ADD_PLANT_TITLE: add_plant_title,
    Step.ADD_PLANT_DESCRIPTION: add_plant_description,
}

PHOTO_HANDLERS = {
    Step.ADD_PLANT_PHOTO: add_plant_photo,
}
