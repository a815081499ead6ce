"""Unit tests for the watering notifier.

This module tests the send-hour gate, per-day suppression, failure
isolation between scenarios and the send retry policy.
"""
import asyncio
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from telegram.error import BadRequest, NetworkError
from tenacity import wait_none

from plantcare.utils.formatting import NO_PLANTS_TEXT
from plantcare.scheduler.notifier import NotificationSuppressor, WateringNotifier


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def mock_bot():
    bot = MagicMock()
    bot.send_message = AsyncMock(
        return_value=MagicMock(message_id=100, date=datetime(2024, 6, 10, 9, 0, tzinfo=timezone.utc))
    )
    return bot


@pytest.fixture
def mock_services(sample_user, make_plant):
    """Patch services where they are imported in the notifier."""
    with patch("plantcare.scheduler.notifier.GroupService") as group_svc, \
         patch("plantcare.scheduler.notifier.UserService") as user_svc, \
         patch("plantcare.scheduler.notifier.PlantService") as plant_svc, \
         patch("plantcare.scheduler.notifier.NotificationService") as notification_svc:
        group_svc.get_groups_for_notify = AsyncMock(return_value=[])
        user_svc.get_user_by_id = AsyncMock(return_value=sample_user)
        plant_svc.get_group_plants = AsyncMock(return_value=[make_plant(title="Фикус")])
        notification_svc.save_notification = AsyncMock(side_effect=lambda db, notification: notification)
        yield {
            "group": group_svc,
            "user": user_svc,
            "plant": plant_svc,
            "notification": notification_svc
        }


@pytest.fixture
def notifier(mock_bot, mock_db):
    return WateringNotifier(
        mock_bot,
        NotificationSuppressor(),
        limit=100,
        offset=0,
        session_factory=MagicMock(return_value=mock_db),
        send_hour=12,
        timezone_str="Europe/Moscow"
    )


# ============================================================================
# Tests for tick
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestTick:
    """Test one notification pass."""

    async def test_before_send_hour(self, notifier, mock_bot, mock_services, make_group, moscow_time):
        """✅ 08:00 local → zero sends, no storage reads."""
        mock_services["group"].get_groups_for_notify.return_value = [make_group()]

        sent = await notifier.tick(now=moscow_time(2024, 6, 10, 8, 0))

        assert sent == 0
        notifier.session_factory.assert_not_called()
        mock_services["group"].get_groups_for_notify.assert_not_awaited()
        mock_bot.send_message.assert_not_awaited()

    async def test_suppressed_same_day(self, notifier, mock_bot, mock_services, make_group, moscow_time):
        """✅ 12:00 → one send and one record; 12:05 → nothing."""
        mock_services["group"].get_groups_for_notify.return_value = [make_group(group_id=3)]

        first = await notifier.tick(now=moscow_time(2024, 6, 10, 12, 0))
        second = await notifier.tick(now=moscow_time(2024, 6, 10, 12, 5))

        assert first == 1
        assert second == 0
        mock_bot.send_message.assert_awaited_once()
        mock_services["notification"].save_notification.assert_awaited_once()

    async def test_notified_again_next_day(self, notifier, mock_bot, mock_services, make_group, moscow_time):
        """✅ Suppression only lasts for the calendar day."""
        mock_services["group"].get_groups_for_notify.return_value = [make_group(group_id=3)]

        await notifier.tick(now=moscow_time(2024, 6, 10, 12, 0))
        sent = await notifier.tick(now=moscow_time(2024, 6, 11, 12, 0))

        assert sent == 1
        assert mock_bot.send_message.await_count == 2

    async def test_selection_parameters(self, notifier, mock_services, mock_db, moscow_time):
        """✅ Page and reference instant passed to the selection."""
        now = moscow_time(2024, 6, 10, 12, 0)

        await notifier.tick(now=now)

        mock_services["group"].get_groups_for_notify.assert_awaited_once_with(mock_db, 100, 0, now=now)

    async def test_failure_does_not_stop_tick(self, notifier, mock_bot, mock_services, make_group, sample_user, moscow_time):
        """✅ One failing scenario is skipped; the rest are sent."""
        from plantcare.core.exceptions import UserNotFoundError

        mock_services["group"].get_groups_for_notify.return_value = [
            make_group(group_id=1, user_id=404),
            make_group(group_id=2, user_id=1),
        ]
        mock_services["user"].get_user_by_id.side_effect = [UserNotFoundError("gone"), sample_user]

        sent = await notifier.tick(now=moscow_time(2024, 6, 10, 12, 0))

        assert sent == 1
        mock_bot.send_message.assert_awaited_once()
        assert await notifier.suppressor.was_notified_since(1, moscow_time(2024, 6, 10)) is False
        assert await notifier.suppressor.was_notified_since(2, moscow_time(2024, 6, 10)) is True

    async def test_failed_send_retried_next_tick(self, notifier, mock_bot, mock_services, make_group, moscow_time):
        """✅ Failed send releases the scenario; the next tick sends it."""
        mock_services["group"].get_groups_for_notify.return_value = [make_group(group_id=3)]
        mock_bot.send_message.side_effect = [
            BadRequest("Chat not found"),
            MagicMock(message_id=100, date=None),
        ]

        first = await notifier.tick(now=moscow_time(2024, 6, 10, 12, 0))
        second = await notifier.tick(now=moscow_time(2024, 6, 10, 12, 1))

        assert (first, second) == (0, 1)
        assert mock_bot.send_message.await_count == 2

    async def test_overlapping_pages_sent_once(self, mock_bot, mock_db, mock_services, make_group, moscow_time):
        """✅ Two notifiers sharing a suppressor see the same scenario → one reminder."""
        async def slow_send(**kwargs):
            await asyncio.sleep(0)
            return MagicMock(message_id=100, date=None)

        mock_bot.send_message.side_effect = slow_send
        mock_services["group"].get_groups_for_notify.return_value = [make_group(group_id=3)]
        suppressor = NotificationSuppressor()
        notifiers = [
            WateringNotifier(
                mock_bot,
                suppressor,
                limit=1,
                offset=offset,
                session_factory=MagicMock(return_value=mock_db),
                send_hour=12,
                timezone_str="Europe/Moscow"
            )
            for offset in (0, 1)
        ]
        now = moscow_time(2024, 6, 10, 12, 0)

        results = await asyncio.gather(*(n.tick(now=now) for n in notifiers))

        assert sum(results) == 1
        mock_bot.send_message.assert_awaited_once()
        mock_services["notification"].save_notification.assert_awaited_once()


# ============================================================================
# Tests for notify_group
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestNotifyGroup:
    """Test sending and recording one reminder."""

    async def test_message_and_record(self, notifier, mock_bot, mock_services, make_group):
        """✅ Sent to the owner's chat with the watered button and recorded."""
        notification = await notifier.notify_group(make_group(group_id=3))

        kwargs = mock_bot.send_message.call_args.kwargs
        assert kwargs["chat_id"] == 5559999
        assert "1) Фикус" in kwargs["text"]
        button = kwargs["reply_markup"].inline_keyboard[0][0]
        assert button.callback_data == "group_watered:3"

        assert notification.group_id == 3
        assert notification.message_id == 100
        assert notification.text == kwargs["text"]
        assert notification.sent_at == datetime(2024, 6, 10, 9, 0, tzinfo=timezone.utc)

    async def test_empty_group_still_sent(self, notifier, mock_bot, mock_services, make_group):
        """✅ Scenario without plants → sentinel line, still sent."""
        mock_services["plant"].get_group_plants.return_value = []

        await notifier.notify_group(make_group())

        assert NO_PLANTS_TEXT.strip() in mock_bot.send_message.call_args.kwargs["text"]

    async def test_retry_on_network_error(self, notifier, mock_bot, mock_services, make_group):
        """✅ Transient network failure is retried."""
        mock_bot.send_message.side_effect = [
            NetworkError("connection reset"),
            MagicMock(message_id=101, date=None),
        ]

        with patch.object(WateringNotifier._send_message.retry, "wait", wait_none()):
            notification = await notifier.notify_group(make_group())

        assert mock_bot.send_message.await_count == 2
        assert notification.message_id == 101

    async def test_bad_request_not_retried(self, notifier, mock_bot, mock_services, make_group):
        """❌ Rejected request (e.g. chat not found) fails at once."""
        mock_bot.send_message.side_effect = BadRequest("Chat not found")

        with pytest.raises(BadRequest):
            await notifier.notify_group(make_group())

        assert mock_bot.send_message.await_count == 1
        mock_services["notification"].save_notification.assert_not_awaited()


# ============================================================================
# Tests for NotificationSuppressor
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestSuppressor:
    """Test the per-day suppression map."""

    async def test_unknown_group(self, moscow_time):
        """✅ Never notified → not suppressed."""
        assert await NotificationSuppressor().was_notified_since(1, moscow_time(2024, 6, 10)) is False

    async def test_boundary(self, moscow_time):
        """✅ Claimed at the very start of today counts as today."""
        suppressor = NotificationSuppressor()
        assert await suppressor.try_claim(1, moscow_time(2024, 6, 10), moscow_time(2024, 6, 10)) is True

        assert await suppressor.was_notified_since(1, moscow_time(2024, 6, 10)) is True
        assert await suppressor.was_notified_since(1, moscow_time(2024, 6, 11)) is False
        assert len(suppressor) == 1

    async def test_second_claim_same_day(self, moscow_time):
        """❌ Scenario already claimed today → second claim refused."""
        suppressor = NotificationSuppressor()
        today = moscow_time(2024, 6, 10)

        assert await suppressor.try_claim(1, today, moscow_time(2024, 6, 10, 12, 0)) is True
        assert await suppressor.try_claim(1, today, moscow_time(2024, 6, 10, 12, 1)) is False
        assert await suppressor.try_claim(2, today, moscow_time(2024, 6, 10, 12, 1)) is True

    async def test_release(self, moscow_time):
        """✅ Released claim can be taken again the same day."""
        suppressor = NotificationSuppressor()
        today = moscow_time(2024, 6, 10)
        await suppressor.try_claim(1, today, moscow_time(2024, 6, 10, 12, 0))

        await suppressor.release(1)

        assert await suppressor.was_notified_since(1, today) is False
        assert await suppressor.try_claim(1, today, moscow_time(2024, 6, 10, 12, 1)) is True

    async def test_previous_days_evicted(self, moscow_time):
        """✅ Entries from earlier days are dropped on the next claim."""
        suppressor = NotificationSuppressor()
        for group_id in (1, 2, 3):
            await suppressor.try_claim(group_id, moscow_time(2024, 6, 10), moscow_time(2024, 6, 10, 12, 0))
        assert len(suppressor) == 3

        await suppressor.try_claim(4, moscow_time(2024, 6, 11), moscow_time(2024, 6, 11, 12, 0))

        assert len(suppressor) == 1
        assert await suppressor.was_notified_since(4, moscow_time(2024, 6, 11)) is True
