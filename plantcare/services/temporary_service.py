"""Wizard scratchpad service.

Every wizard transition loads the user's Temporary row, checks the business
rules for the field being committed, updates the draft and step, and writes
everything back in one commit. A failure anywhere leaves the row unchanged.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from plantcare.core.config import settings
from plantcare.core.database import utcnow
from plantcare.core.exceptions import (
    TemporaryNotFoundError,
    GroupAlreadyExistsError,
    GroupNotFoundError,
    PlantAlreadyExistsError,
    PlantsLimitExceededError,
    PlantNotFoundError,
    TemporaryDataError,
)
from plantcare.models import Group, Plant, Temporary, Step, GroupDraft, PlantDraft
from plantcare.services.user_service import UserService
from plantcare.services.group_service import GroupService
from plantcare.services.plant_service import PlantService
from plantcare.utils.time import compute_next_watering_date

logger = logging.getLogger(__name__)


class TemporaryService:
    """Service for wizard state transitions."""

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    @staticmethod
    async def create_temporary(db: AsyncSession, temporary: Temporary) -> int:
        """Create the scratchpad row; a second row for the same user violates the unique index."""
        db.add(temporary)
        await db.commit()
        await db.refresh(temporary)
        return temporary.id

    @staticmethod
    async def update_temporary(db: AsyncSession, temporary: Temporary) -> None:
        """Write step, message ID and data of the scratchpad, matched by ID."""
        try:
            await db.execute(
                update(Temporary)
                .where(Temporary.id == temporary.id)
                .values(
                    step=int(temporary.step),
                    message_id=temporary.message_id,
                    data=temporary.data,
                    updated_at=utcnow()
                )
            )
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to update temporary {temporary.id}: {e}", exc_info=True)
            raise

    @staticmethod
    async def get_temporary_by_user_id(
        db: AsyncSession,
        user_id: int,
        for_update: bool = False
    ) -> Temporary:
        """
        Get the scratchpad of a user.

        Args:
            db: Database session
            user_id: Internal user ID
            for_update: Lock the row until commit (ignored by SQLite)

        Raises:
            TemporaryNotFoundError: the user has no scratchpad
        """
        query = select(Temporary).where(Temporary.user_id == user_id)
        if for_update:
            query = query.with_for_update()

        result = await db.execute(query)
        temporary = result.scalar_one_or_none()
        if temporary is None:
            raise TemporaryNotFoundError(f"Temporary for user {user_id} not found")
        return temporary

    @staticmethod
    async def get_user_temporary(
        db: AsyncSession,
        telegram_id: int,
        for_update: bool = False
    ) -> Temporary:
        """Get the scratchpad of a user by Telegram ID."""
        user = await UserService.get_user_by_telegram_id(db, telegram_id)
        return await TemporaryService.get_temporary_by_user_id(db, user.id, for_update=for_update)

    @staticmethod
    async def reset_temporary(db: AsyncSession, telegram_id: int, step: Step = Step.START) -> Temporary:
        """Clear draft and message ID and move to the given step."""
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        temporary.step = int(step)
        temporary.message_id = None
        temporary.data = None
        await TemporaryService.update_temporary(db, temporary)
        return temporary

    @staticmethod
    async def set_temporary_step(db: AsyncSession, telegram_id: int, step: Step) -> Temporary:
        """Move to another step keeping the draft."""
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        temporary.step = int(step)
        await TemporaryService.update_temporary(db, temporary)
        return temporary

    @staticmethod
    async def set_temporary_message(
        db: AsyncSession,
        telegram_id: int,
        message_id: Optional[int]
    ) -> Temporary:
        """Remember the prompt message so it can be removed on the next reply."""
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        temporary.message_id = message_id
        await TemporaryService.update_temporary(db, temporary)
        return temporary

    @staticmethod
    async def _save(
        db: AsyncSession,
        temporary: Temporary,
        step: Step,
        draft,
        clear_message: bool
    ) -> None:
        temporary.step = int(step)
        temporary.set_draft(draft)
        if clear_message:
            temporary.message_id = None
        await TemporaryService.update_temporary(db, temporary)

    # ------------------------------------------------------------------
    # Group creation wizard
    # ------------------------------------------------------------------

    @staticmethod
    async def add_group_title(db: AsyncSession, telegram_id: int, title: str) -> GroupDraft:
        """
        Start a scenario draft with the given title.

        Raises:
            GroupAlreadyExistsError: the user already has a scenario with this title
        """
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        if await GroupService.group_exists(db, temporary.user_id, title):
            raise GroupAlreadyExistsError(f"Group {title!r} already exists for user {temporary.user_id}")

        draft = GroupDraft(user_id=temporary.user_id, title=title)
        await TemporaryService._save(db, temporary, Step.ADD_GROUP_DESCRIPTION, draft, clear_message=True)
        return draft

    @staticmethod
    async def add_group_description(db: AsyncSession, telegram_id: int, description: str) -> GroupDraft:
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = temporary.get_group_draft()
        draft.description = description
        await TemporaryService._save(db, temporary, Step.ADD_GROUP_LAST_WATERING_DATE, draft, clear_message=True)
        return draft

    @staticmethod
    async def add_group_last_watering_date(
        db: AsyncSession,
        telegram_id: int,
        last_watering_date: datetime
    ) -> GroupDraft:
        # The calendar message stays, so the message ID is kept
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = temporary.get_group_draft()
        draft.last_watering_date = last_watering_date
        await TemporaryService._save(db, temporary, Step.ADD_GROUP_WATERING_INTERVAL, draft, clear_message=False)
        return draft

    @staticmethod
    async def add_group_watering_interval(
        db: AsyncSession,
        telegram_id: int,
        watering_interval: int
    ) -> GroupDraft:
        """Set the interval and compute the next watering date of the draft."""
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = temporary.get_group_draft()
        if draft.last_watering_date is None:
            raise TemporaryDataError("Last watering date must be set before the watering interval")

        draft.watering_interval = watering_interval
        draft.next_watering_date = compute_next_watering_date(draft.last_watering_date, watering_interval)
        await TemporaryService._save(db, temporary, Step.CONFIRM_ADD_GROUP, draft, clear_message=False)
        return draft

    @staticmethod
    async def confirm_add_group(db: AsyncSession, telegram_id: int) -> Group:
        """
        Create the scenario from the draft and reset the wizard.

        Raises:
            GroupAlreadyExistsError: a scenario with this title appeared meanwhile
        """
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = temporary.get_group_draft()
        if await GroupService.group_exists(db, draft.user_id, draft.title):
            raise GroupAlreadyExistsError(f"Group {draft.title!r} already exists for user {draft.user_id}")

        group = draft.to_group()
        await GroupService.create_group(db, group)
        await TemporaryService.reset_temporary(db, telegram_id)
        return group

    # ------------------------------------------------------------------
    # Plant creation wizard
    # ------------------------------------------------------------------

    @staticmethod
    async def add_plant_title(db: AsyncSession, telegram_id: int, title: str) -> PlantDraft:
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = PlantDraft(user_id=temporary.user_id, title=title)
        await TemporaryService._save(db, temporary, Step.ADD_PLANT_DESCRIPTION, draft, clear_message=True)
        return draft

    @staticmethod
    async def add_plant_description(db: AsyncSession, telegram_id: int, description: str) -> PlantDraft:
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = temporary.get_plant_draft()
        draft.description = description
        await TemporaryService._save(db, temporary, Step.ADD_PLANT_GROUP, draft, clear_message=True)
        return draft

    @staticmethod
    async def add_plant_group(db: AsyncSession, telegram_id: int, group_id: int) -> PlantDraft:
        """
        Attach the plant draft to one of the user's scenarios.

        Raises:
            GroupNotFoundError: the scenario does not exist or belongs to another user
            PlantsLimitExceededError: the scenario is full
            PlantAlreadyExistsError: the scenario already has a plant with this title
        """
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = temporary.get_plant_draft()

        group = await GroupService.get_group(db, group_id)
        if group.user_id != draft.user_id:
            raise GroupNotFoundError(f"Group with id={group_id} not found for user {draft.user_id}")
        if await PlantService.count_group_plants(db, group_id) >= settings.plants_per_group_limit:
            raise PlantsLimitExceededError(f"Group {group_id} already has the maximum number of plants")
        if await PlantService.plant_exists(db, group_id, draft.title):
            raise PlantAlreadyExistsError(f"Plant {draft.title!r} already exists in group {group_id}")

        draft.group_id = group_id
        await TemporaryService._save(db, temporary, Step.ADD_PLANT_PHOTO_QUESTION, draft, clear_message=False)
        return draft

    @staticmethod
    async def add_plant_photo(db: AsyncSession, telegram_id: int, photo: Optional[bytes]) -> PlantDraft:
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = temporary.get_plant_draft()
        draft.photo = photo
        await TemporaryService._save(db, temporary, Step.CONFIRM_ADD_PLANT, draft, clear_message=True)
        return draft

    @staticmethod
    async def confirm_add_plant(db: AsyncSession, telegram_id: int) -> Plant:
        """
        Create the plant from the draft and reset the wizard.

        Raises:
            PlantAlreadyExistsError: a plant with this title appeared meanwhile
        """
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        draft = temporary.get_plant_draft()
        if draft.group_id is not None and await PlantService.plant_exists(db, draft.group_id, draft.title):
            raise PlantAlreadyExistsError(f"Plant {draft.title!r} already exists in group {draft.group_id}")

        plant = draft.to_plant()
        await PlantService.create_plant(db, plant)
        await TemporaryService.reset_temporary(db, telegram_id)
        return plant

    # ------------------------------------------------------------------
    # Management flows
    # ------------------------------------------------------------------

    @staticmethod
    async def manage_group(
        db: AsyncSession,
        telegram_id: int,
        group_id: int,
        step: Step = Step.MANAGE_GROUP_ACTION
    ) -> Group:
        """Select one of the user's scenarios for management."""
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        group = await GroupService.get_group(db, group_id)
        if group.user_id != temporary.user_id:
            raise GroupNotFoundError(f"Group with id={group_id} not found for user {temporary.user_id}")

        await TemporaryService._save(db, temporary, step, GroupDraft.from_group(group), clear_message=False)
        return group

    @staticmethod
    async def manage_plant(
        db: AsyncSession,
        telegram_id: int,
        plant_id: int,
        step: Step = Step.MANAGE_PLANT_ACTION
    ) -> Plant:
        """Select one of the user's plants for management."""
        temporary = await TemporaryService.get_user_temporary(db, telegram_id, for_update=True)
        plant = await PlantService.get_plant(db, plant_id)
        if plant.user_id != temporary.user_id:
            raise PlantNotFoundError(f"Plant with id={plant_id} not found for user {temporary.user_id}")

        await TemporaryService._save(db, temporary, step, PlantDraft.from_plant(plant), clear_message=False)
        return plant
