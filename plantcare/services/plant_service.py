"""Plant service."""
import logging
from typing import List, Optional
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.core.config import settings
from plantcare.core.database import utcnow
from plantcare.core.exceptions import (
    PlantNotFoundError,
    PlantAlreadyExistsError,
    PlantOwnershipError,
    PlantsLimitExceededError,
)
from plantcare.models import Plant
from plantcare.services.group_service import GroupService

logger = logging.getLogger(__name__)


class PlantService:
    """Service for plant storage and business rules."""

    @staticmethod
    async def create_plant(db: AsyncSession, plant: Plant) -> int:
        """
        Persist a new plant.

        Raises:
            GroupNotFoundError: the target scenario does not exist
            PlantOwnershipError: plant and scenario belong to different users
            PlantAlreadyExistsError: the scenario already has a plant with this title
        """
        group = await GroupService.get_group(db, plant.group_id)
        if group.user_id != plant.user_id:
            raise PlantOwnershipError(
                f"Plant owner {plant.user_id} differs from group {group.id} owner {group.user_id}"
            )

        db.add(plant)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if await PlantService.plant_exists(db, plant.group_id, plant.title):
                raise PlantAlreadyExistsError(
                    f"Plant {plant.title!r} already exists in group {plant.group_id}"
                ) from e
            logger.error(f"Failed to create plant in group {plant.group_id}: {e}", exc_info=True)
            raise

        await db.refresh(plant)
        logger.info(f"Created plant {plant.id} in group {plant.group_id}")
        return plant.id

    @staticmethod
    async def update_plant(db: AsyncSession, plant: Plant) -> None:
        """Update mutable fields of a plant. A missing row is not an error."""
        try:
            await db.execute(
                update(Plant)
                .where(Plant.id == plant.id)
                .values(
                    group_id=plant.group_id,
                    title=plant.title,
                    description=plant.description,
                    photo=plant.photo,
                    updated_at=utcnow()
                )
            )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise PlantAlreadyExistsError(
                f"Plant {plant.title!r} already exists in group {plant.group_id}"
            ) from e
        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to update plant {plant.id}: {e}", exc_info=True)
            raise

    @staticmethod
    async def plant_exists(db: AsyncSession, group_id: int, title: str) -> bool:
        """Check whether the scenario has a plant with this title."""
        result = await db.execute(
            select(Plant.id)
            .where(Plant.group_id == group_id, Plant.title == title)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def delete_plant(db: AsyncSession, plant_id: int) -> None:
        await db.execute(delete(Plant).where(Plant.id == plant_id))
        await db.commit()
        logger.info(f"Deleted plant {plant_id}")

    @staticmethod
    async def get_plant(db: AsyncSession, plant_id: int) -> Plant:
        """Get plant by ID or raise PlantNotFoundError."""
        result = await db.execute(
            select(Plant).where(Plant.id == plant_id)
        )
        plant = result.scalar_one_or_none()
        if plant is None:
            raise PlantNotFoundError(f"Plant with id={plant_id} not found")
        return plant

    @staticmethod
    async def get_group_plants(db: AsyncSession, group_id: int) -> List[Plant]:
        """Get plants of a scenario ordered by ID."""
        result = await db.execute(
            select(Plant)
            .where(Plant.group_id == group_id)
            .order_by(Plant.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def count_group_plants(db: AsyncSession, group_id: int) -> int:
        result = await db.execute(
            select(func.count(Plant.id)).where(Plant.group_id == group_id)
        )
        return result.scalar_one()

    @staticmethod
    async def count_user_plants(db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count(Plant.id)).where(Plant.user_id == user_id)
        )
        return result.scalar_one()

    @staticmethod
    async def get_user_plants(db: AsyncSession, user_id: int) -> List[Plant]:
        result = await db.execute(
            select(Plant)
            .where(Plant.user_id == user_id)
            .order_by(Plant.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def update_plant_title(db: AsyncSession, plant_id: int, title: str) -> Plant:
        """
        Rename a plant.

        Raises:
            PlantNotFoundError: no plant with this ID
            PlantAlreadyExistsError: the scenario already has a plant with this title
        """
        plant = await PlantService.get_plant(db, plant_id)
        if await PlantService.plant_exists(db, plant.group_id, title):
            raise PlantAlreadyExistsError(f"Plant {title!r} already exists in group {plant.group_id}")

        plant.title = title
        await PlantService.update_plant(db, plant)
        return plant

    @staticmethod
    async def update_plant_group(db: AsyncSession, plant_id: int, group_id: int) -> Plant:
        """
        Move a plant to another scenario of the same user.

        Raises:
            PlantNotFoundError: no plant with this ID
            GroupNotFoundError: the target scenario does not exist
            PlantOwnershipError: the target scenario belongs to another user
            PlantsLimitExceededError: the target scenario is full
            PlantAlreadyExistsError: the target scenario already has a plant with this title
        """
        plant = await PlantService.get_plant(db, plant_id)
        group = await GroupService.get_group(db, group_id)
        if group.user_id != plant.user_id:
            raise PlantOwnershipError(
                f"Plant {plant.id} cannot move to group {group.id} of another user"
            )
        if await PlantService.count_group_plants(db, group_id) >= settings.plants_per_group_limit:
            raise PlantsLimitExceededError(f"Group {group_id} already has the maximum number of plants")
        if await PlantService.plant_exists(db, group_id, plant.title):
            raise PlantAlreadyExistsError(f"Plant {plant.title!r} already exists in group {group_id}")

        plant.group_id = group_id
        await PlantService.update_plant(db, plant)
        return plant

    @staticmethod
    async def update_plant_description(db: AsyncSession, plant_id: int, description: str) -> Plant:
        plant = await PlantService.get_plant(db, plant_id)
        plant.description = description
        await PlantService.update_plant(db, plant)
        return plant

    @staticmethod
    async def update_plant_photo(db: AsyncSession, plant_id: int, photo: Optional[bytes]) -> Plant:
        plant = await PlantService.get_plant(db, plant_id)
        plant.photo = photo
        await PlantService.update_plant(db, plant)
        return plant
