"""Group (watering scenario) service."""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.core.database import utcnow
from plantcare.core.exceptions import GroupNotFoundError, GroupAlreadyExistsError
from plantcare.models import Group
from plantcare.utils.time import compute_next_watering_date

logger = logging.getLogger(__name__)


class GroupService:
    """Service for watering scenario storage and business rules."""

    @staticmethod
    async def create_group(db: AsyncSession, group: Group) -> int:
        """
        Persist a new watering scenario.

        Raises:
            GroupAlreadyExistsError: the user already has a scenario with this title
        """
        db.add(group)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if await GroupService.group_exists(db, group.user_id, group.title):
                raise GroupAlreadyExistsError(
                    f"Group {group.title!r} already exists for user {group.user_id}"
                ) from e
            logger.error(f"Failed to create group for user {group.user_id}: {e}", exc_info=True)
            raise

        await db.refresh(group)
        logger.info(f"Created group {group.id} for user {group.user_id}")
        return group.id

    @staticmethod
    async def update_group(db: AsyncSession, group: Group) -> None:
        """Update mutable fields of a scenario. A missing row is not an error."""
        try:
            await db.execute(
                update(Group)
                .where(Group.id == group.id)
                .values(
                    title=group.title,
                    description=group.description,
                    last_watering_date=group.last_watering_date,
                    next_watering_date=group.next_watering_date,
                    watering_interval=group.watering_interval,
                    updated_at=utcnow()
                )
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise GroupAlreadyExistsError(
                f"Group {group.title!r} already exists for user {group.user_id}"
            ) from e
        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to update group {group.id}: {e}", exc_info=True)
            raise

    @staticmethod
    async def group_exists(db: AsyncSession, user_id: int, title: str) -> bool:
        """Check whether the user has a scenario with this title."""
        result = await db.execute(
            select(Group.id)
            .where(Group.user_id == user_id, Group.title == title)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def delete_group(db: AsyncSession, group_id: int) -> None:
        """Delete a scenario; its plants and notifications go with it."""
        await db.execute(delete(Group).where(Group.id == group_id))
        await db.commit()
        logger.info(f"Deleted group {group_id}")

    @staticmethod
    async def get_group(db: AsyncSession, group_id: int) -> Group:
        """Get scenario by ID or raise GroupNotFoundError."""
        result = await db.execute(
            select(Group).where(Group.id == group_id)
        )
        group = result.scalar_one_or_none()
        if group is None:
            raise GroupNotFoundError(f"Group with id={group_id} not found")
        return group

    @staticmethod
    async def get_user_groups(db: AsyncSession, user_id: int) -> List[Group]:
        """Get all scenarios of a user ordered by ID."""
        result = await db.execute(
            select(Group)
            .where(Group.user_id == user_id)
            .order_by(Group.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def count_user_groups(db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count(Group.id)).where(Group.user_id == user_id)
        )
        return result.scalar_one()

    @staticmethod
    async def get_groups_for_notify(
        db: AsyncSession,
        limit: int,
        offset: int,
        now: Optional[datetime] = None
    ) -> List[Group]:
        """
        Get scenarios whose next watering instant has passed.

        Args:
            db: Database session
            limit: Page size
            offset: Page offset
            now: Reference instant (defaults to the current time)

        Returns:
            Due scenarios ordered by ID
        """
        if now is None:
            now = utcnow()

        result = await db.execute(
            select(Group)
            .where(Group.next_watering_date < now)
            .order_by(Group.id)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    @staticmethod
    async def update_group_title(db: AsyncSession, group_id: int, title: str) -> Group:
        """
        Rename a scenario.

        Raises:
            GroupNotFoundError: no scenario with this ID
            GroupAlreadyExistsError: the owner already has a scenario with this title
        """
        group = await GroupService.get_group(db, group_id)
        if await GroupService.group_exists(db, group.user_id, title):
            raise GroupAlreadyExistsError(f"Group {title!r} already exists for user {group.user_id}")

        group.title = title
        await GroupService.update_group(db, group)
        return group

    @staticmethod
    async def update_group_description(db: AsyncSession, group_id: int, description: str) -> Group:
        group = await GroupService.get_group(db, group_id)
        group.description = description
        await GroupService.update_group(db, group)
        return group

    @staticmethod
    async def update_group_last_watering_date(
        db: AsyncSession,
        group_id: int,
        last_watering_date: datetime
    ) -> Group:
        """Set the last watering date and recompute the next watering date."""
        group = await GroupService.get_group(db, group_id)
        group.last_watering_date = last_watering_date
        group.next_watering_date = compute_next_watering_date(last_watering_date, group.watering_interval)
        await GroupService.update_group(db, group)
        return group

    @staticmethod
    async def update_group_watering_interval(
        db: AsyncSession,
        group_id: int,
        watering_interval: int
    ) -> Group:
        """Set the watering interval and recompute the next watering date."""
        group = await GroupService.get_group(db, group_id)
        group.watering_interval = watering_interval
        group.next_watering_date = compute_next_watering_date(group.last_watering_date, watering_interval)
        await GroupService.update_group(db, group)
        return group
