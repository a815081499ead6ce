"""Notification service for the sent-reminders audit log."""
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.models import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for notification persistence."""

    @staticmethod
    async def save_notification(db: AsyncSession, notification: Notification) -> Notification:
        """
        Record a sent notification.

        A missing scenario surfaces as the storage foreign-key error.

        Returns:
            The stored notification with its ID populated
        """
        db.add(notification)
        try:
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(
                f"Failed to save notification for group {notification.group_id}: {e}",
                exc_info=True
            )
            raise

        await db.refresh(notification)
        return notification
