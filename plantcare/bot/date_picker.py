"""Inline month calendar used to pick the last watering date."""
import calendar
from datetime import date
from typing import List, Optional
from telegram import InlineKeyboardButton

MONTHS = [
    "Январь", "Февраль", "Март", "Апрель", "Май", "Июнь",
    "Июль", "Август", "Сентябрь", "Октябрь", "Ноябрь", "Декабрь",
]
WEEKDAYS = ["Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс"]

# Callback data
CAL_DAY = "cal_day"  # cal_day:YYYY-MM-DD
CAL_NAV = "cal_nav"  # cal_nav:YYYY-MM
NOOP = "noop"


def shift_month(year: int, month: int, delta: int) -> tuple:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def parse_day(payload: str) -> date:
    """Parse the payload of a day button (ISO date)."""
    return date.fromisoformat(payload)


def parse_month(payload: str) -> tuple:
    """Parse the payload of a navigation button (YYYY-MM)."""
    year, month = payload.split("-")
    year, month = int(year), int(month)
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {payload}")
    return year, month


def build_calendar(
    year: int,
    month: int,
    today: date,
    footer: Optional[List[InlineKeyboardButton]] = None
) -> List[List[InlineKeyboardButton]]:
    """
    Build an inline keyboard for one month.

    Days after today are rendered as inactive buttons because the last
    watering cannot be in the future. Navigation past the current month
    is disabled for the same reason.

    Args:
        year: Displayed year
        month: Displayed month (1-12)
        today: Local date used to disable future days
        footer: Extra row appended at the bottom (back/menu buttons)

    Returns:
        Keyboard rows
    """
    keyboard = [
        [InlineKeyboardButton(f"{MONTHS[month - 1]} {year}", callback_data=NOOP)],
        [InlineKeyboardButton(day, callback_data=NOOP) for day in WEEKDAYS],
    ]

    for week in calendar.Calendar(firstweekday=0).monthdayscalendar(year, month):
        row = []
        for day in week:
            if day == 0:
                row.append(InlineKeyboardButton(" ", callback_data=NOOP))
                continue
            current = date(year, month, day)
            if current > today:
                row.append(InlineKeyboardButton("·", callback_data=NOOP))
            else:
                row.append(InlineKeyboardButton(str(day), callback_data=f"{CAL_DAY}:{current.isoformat()}"))
        keyboard.append(row)

    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    next_callback = (
        f"{CAL_NAV}:{next_year:04d}-{next_month:02d}"
        if (next_year, next_month) <= (today.year, today.month)
        else NOOP
    )
    keyboard.append([
        InlineKeyboardButton("◀️", callback_data=f"{CAL_NAV}:{prev_year:04d}-{prev_month:02d}"),
        InlineKeyboardButton("▶️", callback_data=next_callback),
    ])

    if footer:
        keyboard.append(footer)
    return keyboard
