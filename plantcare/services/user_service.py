"""User service for CRUD operations."""
import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.core.exceptions import UserNotFoundError
from plantcare.models import User, Temporary, Step

logger = logging.getLogger(__name__)


class UserService:
    """Service for user management."""

    @staticmethod
    async def save_user(
        db: AsyncSession,
        telegram_id: int,
        firstname: Optional[str] = None,
        lastname: Optional[str] = None,
        username: Optional[str] = None,
        is_bot: bool = False
    ) -> int:
        """
        Get existing user by Telegram ID or create a new one with its wizard scratchpad.

        The user row and its Temporary row are written in one transaction, so
        a user never exists without a Temporary.

        Args:
            db: Database session
            telegram_id: Telegram user ID
            firstname: Telegram first name
            lastname: Telegram last name
            username: Telegram username (without @)
            is_bot: Whether the account is a bot

        Returns:
            Internal user ID
        """
        result = await db.execute(
            select(User).where(User.telegram_id == telegram_id)
        )
        user = result.scalar_one_or_none()

        if user:
            return user.id

        user = User(
            telegram_id=telegram_id,
            username=username,
            firstname=firstname,
            lastname=lastname,
            is_bot=is_bot
        )
        db.add(user)

        try:
            await db.flush()
            db.add(Temporary(user_id=user.id, step=int(Step.START)))
            await db.commit()
        except IntegrityError:
            # Concurrent /start for the same account already created the user
            await db.rollback()
            logger.info(f"User with telegram_id={telegram_id} was created concurrently")
            existing = await UserService.get_user_by_telegram_id(db, telegram_id)
            return existing.id
        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to save user with telegram_id={telegram_id}: {e}", exc_info=True)
            raise

        logger.info(f"Created user {user.id} for telegram_id={telegram_id}")
        return user.id

    @staticmethod
    async def get_user_by_telegram_id(db: AsyncSession, telegram_id: int) -> User:
        """Get user by Telegram ID or raise UserNotFoundError."""
        result = await db.execute(
            select(User).where(User.telegram_id == telegram_id)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(f"User with telegram_id={telegram_id} not found")
        return user

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
        """Get user by internal ID or raise UserNotFoundError."""
        result = await db.execute(
            select(User).where(User.id == user_id)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(f"User with id={user_id} not found")
        return user
