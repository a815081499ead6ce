"""Telegram message formatting utilities."""
from typing import Optional, Sequence
from plantcare.models import Group, Plant, GroupDraft, PlantDraft
from plantcare.utils.time import format_date

NO_PLANTS_TEXT = "В данный сценарий полива пока что не было добавлено ни одно растение!\n"
EMPTY_DESCRIPTION = "➖"


def format_watering_interval(days: int) -> str:
    """
    Format a watering interval with the Russian plural form of "day".

    Examples: 1 день, 3 дня, 7 дней, 21 день
    """
    if days % 10 == 1 and days % 100 != 11:
        word = "день"
    elif days % 10 in (2, 3, 4) and days % 100 not in (12, 13, 14):
        word = "дня"
    else:
        word = "дней"
    return f"{days} {word}"


def format_watering_frequency(days: int) -> str:
    """Human-readable cadence, e.g. "каждые 7 дней"."""
    if days == 1:
        return "каждый день"
    if days % 10 == 1 and days % 100 != 11:
        return f"каждый {format_watering_interval(days)}"
    return f"каждые {format_watering_interval(days)}"


def format_plants_list(plants: Sequence[Plant]) -> str:
    """Numbered list of plant titles, or the "no plants" line when empty."""
    if not plants:
        return NO_PLANTS_TEXT
    return "".join(f"{index}) {plant.title}\n" for index, plant in enumerate(plants, start=1))


def format_notification_message(group: Group, plants: Sequence[Plant]) -> str:
    """
    Format a watering reminder for a scenario.

    Args:
        group: Scenario that is due
        plants: Plants of the scenario, in display order

    Returns:
        Formatted message string
    """
    message = f"""
💧 Пора поливать растения!

🪴 Сценарий: {group.title}
📝 Описание: {group.description or EMPTY_DESCRIPTION}
📅 Последний полив: {format_date(group.last_watering_date)}
🔁 Полив {format_watering_frequency(group.watering_interval)}

🌿 Растения:
{format_plants_list(plants)}
    """.strip()

    return message


def format_group_card(group: Group, plants_count: Optional[int] = None) -> str:
    """Scenario details shown in the management menu."""
    lines = [
        f"🪴 Сценарий: {group.title}",
        f"📝 Описание: {group.description or EMPTY_DESCRIPTION}",
        f"📅 Последний полив: {format_date(group.last_watering_date)}",
        f"⏭ Следующий полив: {format_date(group.next_watering_date)}",
        f"🔁 Интервал полива: {format_watering_interval(group.watering_interval)}",
    ]
    if plants_count is not None:
        lines.append(f"🌿 Растений: {plants_count}")
    return "\n".join(lines)


def format_group_draft(draft: GroupDraft) -> str:
    """Summary of a scenario being created, for the confirmation step."""
    lines = [
        f"🪴 Название: {draft.title}",
        f"📝 Описание: {draft.description or EMPTY_DESCRIPTION}",
    ]
    if draft.last_watering_date is not None:
        lines.append(f"📅 Последний полив: {format_date(draft.last_watering_date)}")
    if draft.watering_interval is not None:
        lines.append(f"🔁 Интервал полива: {format_watering_interval(draft.watering_interval)}")
    if draft.next_watering_date is not None:
        lines.append(f"⏭ Следующий полив: {format_date(draft.next_watering_date)}")
    return "\n".join(lines)


def format_plant_card(plant: Plant, group_title: str) -> str:
    """Plant details shown in the management menu."""
    return (
        f"🌿 Растение: {plant.title}\n"
        f"📝 Описание: {plant.description or EMPTY_DESCRIPTION}\n"
        f"🪴 Сценарий полива: {group_title}"
    )


def format_plant_draft(draft: PlantDraft, group_title: Optional[str] = None) -> str:
    """Summary of a plant being created, for the confirmation step."""
    lines = [
        f"🌿 Название: {draft.title}",
        f"📝 Описание: {draft.description or EMPTY_DESCRIPTION}",
    ]
    if group_title is not None:
        lines.append(f"🪴 Сценарий полива: {group_title}")
    lines.append(f"📷 Фото: {'есть' if draft.photo else 'нет'}")
    return "\n".join(lines)
