"""Inline keyboards and callback data.

Callback data has the form ``action`` or ``action:payload``.
"""
from datetime import date
from typing import List, Optional, Sequence, Tuple
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from plantcare.bot import texts
from plantcare.bot.date_picker import build_calendar
from plantcare.utils.formatting import format_watering_interval

# Global actions, valid at any step
MENU = "menu"
CANCEL = "cancel"
CREATE_GROUP = "create_group"
ADD_PLANT = "add_plant"
MANAGE_GROUPS = "manage_groups"
MANAGE_PLANTS = "manage_plants"
GROUP_WATERED = "group_watered"

# Step actions, interpreted according to the current step
BACK = "back"
SKIP = "skip"
CONFIRM = "confirm"
INTERVAL = "interval"
PICK_GROUP = "group"
PICK_PLANT = "plant"
PHOTO_YES = "photo_yes"
PHOTO_NO = "photo_no"
CHANGE = "change"
REMOVE = "remove"
SEE_PLANTS = "see_plants"
FIELD = "field"

WATERING_INTERVALS = [1, 2, 3, 4, 5, 6, 7, 10, 14, 18, 21, 30]
BUTTONS_PER_ROW = 2


def parse_callback_data(data: str) -> Tuple[str, Optional[str]]:
    """Split callback data into action and optional payload."""
    action, _, payload = (data or "").partition(":")
    return action, payload or None


def back_button() -> InlineKeyboardButton:
    return InlineKeyboardButton(texts.BACK_BUTTON, callback_data=BACK)


def menu_button() -> InlineKeyboardButton:
    return InlineKeyboardButton(texts.MENU_BUTTON, callback_data=MENU)


def navigation_row(with_back: bool = True) -> List[InlineKeyboardButton]:
    return [back_button(), menu_button()] if with_back else [menu_button()]


def main_menu_keyboard(groups_count: int, plants_count: int) -> InlineKeyboardMarkup:
    """Main menu; options appear once there is something to manage."""
    keyboard = [[InlineKeyboardButton(texts.CREATE_GROUP_BUTTON, callback_data=CREATE_GROUP)]]
    if groups_count > 0:
        keyboard.append([InlineKeyboardButton(texts.ADD_PLANT_BUTTON, callback_data=ADD_PLANT)])
        keyboard.append([InlineKeyboardButton(texts.MANAGE_GROUPS_BUTTON, callback_data=MANAGE_GROUPS)])
    if plants_count > 0:
        keyboard.append([InlineKeyboardButton(texts.MANAGE_PLANTS_BUTTON, callback_data=MANAGE_PLANTS)])
    return InlineKeyboardMarkup(keyboard)


def navigation_keyboard(with_back: bool = True) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([navigation_row(with_back)])


def skip_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(texts.SKIP_BUTTON, callback_data=SKIP)],
        navigation_row(),
    ])


def calendar_keyboard(year: int, month: int, today: date) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(build_calendar(year, month, today, footer=navigation_row()))


def watering_interval_keyboard() -> InlineKeyboardMarkup:
    """Interval choices, two per row."""
    keyboard = []
    row = []
    for days in WATERING_INTERVALS:
        row.append(InlineKeyboardButton(format_watering_interval(days), callback_data=f"{INTERVAL}:{days}"))
        if len(row) == BUTTONS_PER_ROW:
            keyboard.append(row)
            row = []
    if row:
        keyboard.append(row)
    keyboard.append(navigation_row())
    return InlineKeyboardMarkup(keyboard)


def confirm_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(texts.CONFIRM_BUTTON, callback_data=CONFIRM)],
        [back_button(), InlineKeyboardButton(texts.CANCEL_BUTTON, callback_data=CANCEL)],
    ])


def group_created_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(texts.ADD_PLANT_BUTTON, callback_data=ADD_PLANT)],
        [menu_button()],
    ])


def groups_keyboard(groups: Sequence, with_back: bool = True) -> InlineKeyboardMarkup:
    """One button per scenario."""
    keyboard = [
        [InlineKeyboardButton(group.title, callback_data=f"{PICK_GROUP}:{group.id}")]
        for group in groups
    ]
    keyboard.append(navigation_row(with_back))
    return InlineKeyboardMarkup(keyboard)


def plants_keyboard(plants: Sequence) -> InlineKeyboardMarkup:
    """One button per plant."""
    keyboard = [
        [InlineKeyboardButton(plant.title, callback_data=f"{PICK_PLANT}:{plant.id}")]
        for plant in plants
    ]
    keyboard.append(navigation_row())
    return InlineKeyboardMarkup(keyboard)


def photo_question_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton(texts.ADD_PHOTO_BUTTON, callback_data=PHOTO_YES),
            InlineKeyboardButton(texts.WITHOUT_PHOTO_BUTTON, callback_data=PHOTO_NO),
        ],
        navigation_row(),
    ])


def group_actions_keyboard(has_plants: bool) -> InlineKeyboardMarkup:
    keyboard = []
    if has_plants:
        keyboard.append([InlineKeyboardButton(texts.SEE_PLANTS_BUTTON, callback_data=SEE_PLANTS)])
    keyboard.append([
        InlineKeyboardButton(texts.CHANGE_BUTTON, callback_data=CHANGE),
        InlineKeyboardButton(texts.REMOVE_BUTTON, callback_data=REMOVE),
    ])
    keyboard.append(navigation_row())
    return InlineKeyboardMarkup(keyboard)


def plant_actions_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton(texts.CHANGE_BUTTON, callback_data=CHANGE),
            InlineKeyboardButton(texts.REMOVE_BUTTON, callback_data=REMOVE),
        ],
        navigation_row(),
    ])


def removal_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(texts.CONFIRM_REMOVE_BUTTON, callback_data=CONFIRM)],
        navigation_row(),
    ])


def fields_keyboard(fields: Sequence[Tuple[str, str]]) -> InlineKeyboardMarkup:
    """Buttons for the editable fields, given as (field, label) pairs."""
    keyboard = [
        [InlineKeyboardButton(label, callback_data=f"{FIELD}:{field}")]
        for field, label in fields
    ]
    keyboard.append(navigation_row())
    return InlineKeyboardMarkup(keyboard)


def group_watered_keyboard(group_id: int) -> InlineKeyboardMarkup:
    """Single acknowledgement button attached to a watering reminder."""
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(texts.GROUP_WATERED_BUTTON, callback_data=f"{GROUP_WATERED}:{group_id}")]
    ])
