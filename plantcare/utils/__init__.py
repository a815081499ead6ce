"""Utilities package initialization."""
from plantcare.utils.time import (
    start_of_today,
    compute_next_watering_date,
    can_notify_by_time,
    format_date,
)
from plantcare.utils.formatting import (
    format_watering_interval,
    format_plants_list,
    format_notification_message,
)

__all__ = [
    "start_of_today",
    "compute_next_watering_date",
    "can_notify_by_time",
    "format_date",
    "format_watering_interval",
    "format_plants_list",
    "format_notification_message"
]
