"""Callback query router for inline buttons."""
import logging
from typing import Optional
from telegram import CallbackQuery, Update
from telegram.error import BadRequest
from telegram.ext import ContextTypes
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.bot import buttons, texts
from plantcare.bot.date_picker import CAL_NAV, NOOP, parse_month
from plantcare.bot.handlers import groups, manage_groups, manage_plants, plants, start
from plantcare.bot.handlers.common import domain_error_text
from plantcare.core.database import AsyncSessionLocal
from plantcare.core.exceptions import GroupNotFoundError, PlantCareError, TemporaryDataError
from plantcare.models import Step, Temporary
from plantcare.services import GroupService, TemporaryService
from plantcare.utils.time import format_date, get_local_time, start_of_today

logger = logging.getLogger(__name__)


async def navigate_calendar(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    temp: Temporary,
    payload: Optional[str]
) -> Optional[str]:
    """Redraw the calendar for another month in place."""
    year, month = parse_month(payload)
    today = get_local_time().date()
    if (year, month) > (today.year, today.month):
        year, month = today.year, today.month

    await update.callback_query.edit_message_reply_markup(
        reply_markup=buttons.calendar_keyboard(year, month, today)
    )
    return None


async def group_watered(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    db: AsyncSession,
    temp: Temporary,
    payload: Optional[str]
) -> Optional[str]:
    """
    Acknowledge a watering reminder.

    Callback data format: "group_watered:<group_id>"
    The scenario counts as watered today; the button is removed from the reminder.
    """
    group = await GroupService.get_group(db, int(payload))
    if group.user_id != temp.user_id:
        raise GroupNotFoundError(f"Group with id={group.id} not found for user {temp.user_id}")

    group = await GroupService.update_group_last_watering_date(db, group.id, start_of_today())
    logger.info(f"Group {group.id} watered, next watering at {group.next_watering_date}")

    await update.callback_query.edit_message_reply_markup(reply_markup=None)
    return texts.GROUP_WATERED.format(next_date=format_date(group.next_watering_date))


# Actions valid at any step
GLOBAL_CALLBACKS = {
    buttons.MENU: start.menu_callback,
    buttons.CANCEL: start.cancel_callback,
    buttons.CREATE_GROUP: groups.start_create_group,
    buttons.ADD_PLANT: plants.start_add_plant,
    buttons.MANAGE_GROUPS: manage_groups.show_groups,
    buttons.MANAGE_PLANTS: manage_plants.show_plant_groups,
    buttons.GROUP_WATERED: group_watered,
}

# Actions keyed by (step, action)
STEP_CALLBACKS = {
    (Step.ADD_GROUP_LAST_WATERING_DATE, CAL_NAV): navigate_calendar,
    (Step.CHANGE_GROUP_LAST_WATERING_DATE, CAL_NAV): navigate_calendar,
    **groups.CALLBACKS,
    **plants.CALLBACKS,
    **manage_groups.CALLBACKS,
    **manage_plants.CALLBACKS,
}


def resolve_callback(step: Step, action: str):
    """Find the handler for a button press at the given step, or None."""
    handler = GLOBAL_CALLBACKS.get(action)
    if handler is None:
        handler = STEP_CALLBACKS.get((step, action))
    return handler


async def answer_query(query: CallbackQuery, text: Optional[str] = None, show_alert: bool = False) -> None:
    """Answer a callback query; expired queries are ignored."""
    try:
        await query.answer(text=text, show_alert=show_alert)
    except BadRequest as e:
        logger.debug(f"Could not answer callback query {query.id}: {e}")


async def button_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """
    Handle all inline button presses.

    Callback data format: "<action>" or "<action>:<payload>"
    The action is looked up among the global actions first and then among
    the actions of the user's current step. Buttons left over from an
    earlier step are answered with a short notice and change nothing.
    """
    query = update.callback_query
    action, payload = buttons.parse_callback_data(query.data)

    if action == NOOP:
        await answer_query(query)
        return

    try:
        async with AsyncSessionLocal() as db:
            temp = await TemporaryService.get_user_temporary(db, update.effective_user.id)
            step = temp.current_step

            handler = resolve_callback(step, action)
            if handler is None:
                logger.debug(f"Stale button {query.data!r} at step {step.name} for user {update.effective_user.id}")
                await answer_query(query, texts.NOT_AVAILABLE)
                return

            answer = await handler(update, context, db, temp, payload)
            await answer_query(query, answer)
    except TemporaryDataError as e:
        logger.error(f"Broken scratchpad for user {update.effective_user.id}: {e}", exc_info=True)
        await answer_query(query, texts.GENERIC_ERROR, show_alert=True)
    except PlantCareError as e:
        logger.info(f"Callback {query.data!r} rejected for user {update.effective_user.id}: {e}")
        await answer_query(query, domain_error_text(e) or texts.GENERIC_ERROR, show_alert=True)
    except Exception as e:
        logger.error(f"Error in button_callback: {e}", exc_info=True)
        await answer_query(query, texts.GENERIC_ERROR, show_alert=True)
