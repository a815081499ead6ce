"""Integration tests for storage, the creation wizards and the notifier.

Run against an in-memory SQLite database with foreign keys enabled.
"""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from plantcare.core.exceptions import GroupAlreadyExistsError, PlantAlreadyExistsError
from plantcare.models import Group, Notification, Plant, Step, Temporary
from plantcare.scheduler.notifier import NotificationSuppressor, WateringNotifier
from plantcare.services import (
    GroupService,
    NotificationService,
    PlantService,
    TemporaryService,
    UserService
)
from plantcare.utils.time import now_utc, start_of_today

TELEGRAM_ID = 5559999


async def count(db, column):
    return (await db.execute(select(func.count(column)))).scalar_one()


@pytest.fixture
async def user_id(test_db):
    return await UserService.save_user(test_db, telegram_id=TELEGRAM_ID, firstname="Анна")


# ============================================================================
# Users
# ============================================================================

@pytest.mark.integration
class TestUsers:
    """Test user registration against the database."""

    async def test_save_user_idempotent(self, test_db):
        """✅ Second /start returns the same user and keeps one scratchpad."""
        first = await UserService.save_user(test_db, telegram_id=TELEGRAM_ID)
        second = await UserService.save_user(test_db, telegram_id=TELEGRAM_ID)

        assert first == second
        assert await count(test_db, Temporary.id) == 1

        temp = await TemporaryService.get_user_temporary(test_db, TELEGRAM_ID)
        assert temp.current_step is Step.START


# ============================================================================
# Groups and plants
# ============================================================================

@pytest.mark.integration
class TestGroupsAndPlants:
    """Test uniqueness, selection and cascading deletes."""

    async def test_group_title_unique_per_user(self, test_db, user_id, make_group):
        """❌ Same title twice for one user; ✅ allowed for another user."""
        await GroupService.create_group(test_db, make_group(group_id=None, user_id=user_id))

        with pytest.raises(GroupAlreadyExistsError):
            await GroupService.create_group(test_db, make_group(group_id=None, user_id=user_id))

        other_id = await UserService.save_user(test_db, telegram_id=7770001)
        await GroupService.create_group(test_db, make_group(group_id=None, user_id=other_id))

        assert await count(test_db, Group.id) == 2

    async def test_plant_title_unique_per_group(self, test_db, user_id, make_group, make_plant):
        """❌ Same plant title twice in one scenario."""
        group_id = await GroupService.create_group(test_db, make_group(group_id=None, user_id=user_id))
        await PlantService.create_plant(test_db, make_plant(plant_id=None, group_id=group_id, user_id=user_id))

        with pytest.raises(PlantAlreadyExistsError):
            await PlantService.create_plant(test_db, make_plant(plant_id=None, group_id=group_id, user_id=user_id))

    async def test_groups_for_notify_paged(self, test_db, user_id, make_group, moscow_time):
        """✅ Only due scenarios, ordered by ID, paged by limit/offset."""
        for title, next_date in [
            ("A", moscow_time(2024, 6, 1)),
            ("B", moscow_time(2024, 6, 9)),
            ("C", moscow_time(2024, 6, 20)),
            ("D", moscow_time(2024, 6, 10, 11, 59)),
        ]:
            await GroupService.create_group(
                test_db,
                make_group(group_id=None, user_id=user_id, title=title, next_watering_date=next_date)
            )
        now = moscow_time(2024, 6, 10, 12, 0)

        first_page = await GroupService.get_groups_for_notify(test_db, 2, 0, now=now)
        second_page = await GroupService.get_groups_for_notify(test_db, 2, 2, now=now)

        assert [group.title for group in first_page] == ["A", "B"]
        assert [group.title for group in second_page] == ["D"]

    async def test_delete_group_cascades(self, test_db, user_id, make_group, make_plant):
        """✅ Plants and notifications go with their scenario."""
        group_id = await GroupService.create_group(test_db, make_group(group_id=None, user_id=user_id))
        await PlantService.create_plant(test_db, make_plant(plant_id=None, group_id=group_id, user_id=user_id))
        await NotificationService.save_notification(
            test_db,
            Notification(group_id=group_id, message_id=1, text="Пора полить", sent_at=now_utc())
        )

        await GroupService.delete_group(test_db, group_id)

        assert await count(test_db, Plant.id) == 0
        assert await count(test_db, Notification.id) == 0

    async def test_notification_for_missing_group(self, test_db):
        """❌ Unknown scenario → foreign key error."""
        with pytest.raises(IntegrityError):
            await NotificationService.save_notification(
                test_db,
                Notification(group_id=999, message_id=1, text="Пора полить", sent_at=now_utc())
            )


# ============================================================================
# Creation wizards
# ============================================================================

@pytest.mark.integration
class TestWizards:
    """Test the creation wizards step by step."""

    async def test_create_group(self, test_db, user_id):
        """✅ Full scenario wizard: draft persisted per step, then scenario created."""
        today = start_of_today()

        await TemporaryService.add_group_title(test_db, TELEGRAM_ID, "Цветы")
        await TemporaryService.add_group_description(test_db, TELEGRAM_ID, "Комнатные")
        temp = await TemporaryService.get_user_temporary(test_db, TELEGRAM_ID)
        assert temp.current_step is Step.ADD_GROUP_LAST_WATERING_DATE
        assert temp.get_group_draft().description == "Комнатные"

        await TemporaryService.add_group_last_watering_date(test_db, TELEGRAM_ID, today)
        await TemporaryService.add_group_watering_interval(test_db, TELEGRAM_ID, 7)
        group = await TemporaryService.confirm_add_group(test_db, TELEGRAM_ID)

        stored = await GroupService.get_group(test_db, group.id)
        assert stored.user_id == user_id
        assert stored.title == "Цветы"
        assert stored.next_watering_date == today + timedelta(days=7)

        temp = await TemporaryService.get_user_temporary(test_db, TELEGRAM_ID)
        assert temp.current_step is Step.START
        assert temp.data is None

    async def test_duplicate_group_title_rejected(self, test_db, user_id, make_group):
        """❌ Existing title at the first step → rejected, step unchanged."""
        await GroupService.create_group(test_db, make_group(group_id=None, user_id=user_id))
        await TemporaryService.set_temporary_step(test_db, TELEGRAM_ID, Step.ADD_GROUP_TITLE)

        with pytest.raises(GroupAlreadyExistsError):
            await TemporaryService.add_group_title(test_db, TELEGRAM_ID, "Цветы")

        temp = await TemporaryService.get_user_temporary(test_db, TELEGRAM_ID)
        assert temp.current_step is Step.ADD_GROUP_TITLE

    async def test_add_plant(self, test_db, user_id, make_group):
        """✅ Full plant wizard ending in the chosen scenario."""
        group_id = await GroupService.create_group(test_db, make_group(group_id=None, user_id=user_id))

        await TemporaryService.add_plant_title(test_db, TELEGRAM_ID, "Фикус")
        await TemporaryService.add_plant_description(test_db, TELEGRAM_ID, "")
        await TemporaryService.add_plant_group(test_db, TELEGRAM_ID, group_id)
        await TemporaryService.add_plant_photo(test_db, TELEGRAM_ID, b"\xff\xd8\xff")
        plant = await TemporaryService.confirm_add_plant(test_db, TELEGRAM_ID)

        plants = await PlantService.get_group_plants(test_db, group_id)
        assert [p.id for p in plants] == [plant.id]
        assert plants[0].photo == b"\xff\xd8\xff"


# ============================================================================
# Notifier
# ============================================================================

@pytest.mark.integration
class TestNotifierStorage:
    """Test a notification pass against the database."""

    async def test_tick_records_notification(self, test_db, session_factory, user_id, make_group, moscow_time):
        """✅ Due scenario notified once and recorded; second tick sends nothing."""
        group_id = await GroupService.create_group(test_db, make_group(group_id=None, user_id=user_id))
        bot = MagicMock()
        bot.send_message = AsyncMock(
            return_value=MagicMock(message_id=555, date=datetime(2024, 6, 10, 9, 0, tzinfo=timezone.utc))
        )
        notifier = WateringNotifier(
            bot,
            NotificationSuppressor(),
            limit=100,
            offset=0,
            session_factory=session_factory,
            send_hour=12,
            timezone_str="Europe/Moscow"
        )

        assert await notifier.tick(now=moscow_time(2024, 6, 10, 12, 0)) == 1
        assert await notifier.tick(now=moscow_time(2024, 6, 10, 12, 1)) == 0

        notifications = (await test_db.execute(select(Notification))).scalars().all()
        assert len(notifications) == 1
        assert notifications[0].group_id == group_id
        assert notifications[0].message_id == 555
        assert bot.send_message.call_args.kwargs["chat_id"] == TELEGRAM_ID
