"""Watering reminders: due scenario selection, per-day suppression and sending."""
import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional
from telegram import Bot, InlineKeyboardMarkup, Message
from telegram.error import BadRequest, NetworkError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    retry_if_not_exception_type,
    before_sleep_log
)
from plantcare.bot.buttons import group_watered_keyboard
from plantcare.core.database import AsyncSessionLocal
from plantcare.models import Group, Notification
from plantcare.services import UserService, GroupService, PlantService, NotificationService
from plantcare.utils.formatting import format_notification_message
from plantcare.utils.time import can_notify_by_time, now_utc, start_of_today

logger = logging.getLogger(__name__)


class NotificationSuppressor:
    """
    Remembers when each scenario was last notified so that a scenario
    gets at most one reminder per calendar day.

    The state lives in process memory only; after a restart a scenario
    may be notified once more on the same day. Several notifiers share
    one instance, so a scenario is claimed under a lock before sending
    and released again if the send fails.
    """

    def __init__(self):
        self._last_notified: Dict[int, datetime] = {}
        self._lock = asyncio.Lock()

    async def was_notified_since(self, group_id: int, since: datetime) -> bool:
        async with self._lock:
            last_notified = self._last_notified.get(group_id)
        return last_notified is not None and last_notified >= since

    async def try_claim(self, group_id: int, since: datetime, now: datetime) -> bool:
        """
        Reserve a scenario for notification.

        Entries older than since are dropped first, so the map only holds
        scenarios notified on the current day.

        Args:
            group_id: Scenario ID
            since: Start of the current local day
            now: Instant recorded for the claim

        Returns:
            False if the scenario was already claimed since the given instant
        """
        async with self._lock:
            self._last_notified = {
                key: notified_at
                for key, notified_at in self._last_notified.items()
                if notified_at >= since
            }
            if group_id in self._last_notified:
                return False
            self._last_notified[group_id] = now
            return True

    async def release(self, group_id: int) -> None:
        """Forget a claim whose reminder was not delivered."""
        async with self._lock:
            self._last_notified.pop(group_id, None)

    def __len__(self) -> int:
        return len(self._last_notified)


class WateringNotifier:
    """Sends reminders for one page of due scenarios on every tick."""

    def __init__(
        self,
        bot: Bot,
        suppressor: NotificationSuppressor,
        limit: int,
        offset: int,
        session_factory=AsyncSessionLocal,
        send_hour: Optional[int] = None,
        timezone_str: Optional[str] = None
    ):
        self.bot = bot
        self.suppressor = suppressor
        self.limit = limit
        self.offset = offset
        self.session_factory = session_factory
        self.send_hour = send_hour
        self.timezone_str = timezone_str

    async def tick(self, now: Optional[datetime] = None) -> int:
        """
        Run one notification pass.

        Nothing is read before the local send hour. A scenario that fails
        to notify is logged and skipped; the remaining scenarios are still
        processed.

        Args:
            now: Reference instant (defaults to the current time)

        Returns:
            Number of reminders sent
        """
        if now is None:
            now = now_utc()

        if not can_notify_by_time(now, self.send_hour, self.timezone_str):
            logger.debug(f"Before send hour, skipping tick (offset={self.offset})")
            return 0

        today = start_of_today(now, self.timezone_str)

        async with self.session_factory() as db:
            groups = await GroupService.get_groups_for_notify(db, self.limit, self.offset, now=now)

        if not groups:
            logger.debug(f"No due groups (limit={self.limit}, offset={self.offset})")
            return 0

        logger.debug(f"Found {len(groups)} due groups (limit={self.limit}, offset={self.offset})")

        sent = 0
        for group in groups:
            if not await self.suppressor.try_claim(group.id, today, now):
                logger.debug(f"Group {group.id} already notified today")
                continue

            try:
                await self.notify_group(group)
            except Exception as e:
                await self.suppressor.release(group.id)
                logger.warning(f"Failed to notify group {group.id}: {e}", exc_info=True)
                continue

            sent += 1

        if sent:
            logger.info(f"Sent {sent} watering reminders (offset={self.offset})")
        return sent

    async def notify_group(self, group: Group) -> Notification:
        """
        Send a reminder for one scenario to its owner and record it.

        Args:
            group: Due scenario

        Returns:
            The stored notification
        """
        async with self.session_factory() as db:
            user = await UserService.get_user_by_id(db, group.user_id)
            plants = await PlantService.get_group_plants(db, group.id)
            text = format_notification_message(group, plants)

            message = await self._send_message(user.telegram_id, text, group_watered_keyboard(group.id))

            notification = Notification(
                group_id=group.id,
                message_id=message.message_id,
                text=text,
                sent_at=message.date or now_utc()
            )
            notification = await NotificationService.save_notification(db, notification)

        logger.info(f"Notified user {user.id} about group {group.id} (message {message.message_id})")
        return notification

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(NetworkError) & retry_if_not_exception_type(BadRequest),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    async def _send_message(self, chat_id: int, text: str, reply_markup: InlineKeyboardMarkup) -> Message:
        """Send with retry on transient network failures; rejected requests are not retried."""
        return await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=reply_markup)
