"""Unit tests for TemporaryService.

This module tests wizard transitions: draft updates, step changes,
message ID handling and the business checks done at each step.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from plantcare.core.exceptions import (
    GroupAlreadyExistsError,
    GroupNotFoundError,
    PlantAlreadyExistsError,
    PlantsLimitExceededError,
    PlantNotFoundError,
    TemporaryDataError,
)
from plantcare.models import GroupDraft, PlantDraft, Step, Temporary
from plantcare.services.temporary_service import TemporaryService
from plantcare.utils.time import start_of_today

TELEGRAM_ID = 5559999


# ============================================================================
# Fixtures
# ============================================================================

def make_temporary(step: Step, draft=None, message_id=None) -> Temporary:
    temp = Temporary(id=1, user_id=1, step=int(step), message_id=message_id)
    temp.set_draft(draft)
    return temp


@pytest.fixture
def mock_storage():
    """Patch scratchpad loading/saving so transitions run without a database."""
    with patch.object(TemporaryService, "get_user_temporary", new_callable=AsyncMock) as get_temp, \
         patch.object(TemporaryService, "update_temporary", new_callable=AsyncMock) as update_temp:
        yield {"get": get_temp, "update": update_temp}


@pytest.fixture
def mock_group_service():
    with patch("plantcare.services.temporary_service.GroupService") as svc:
        svc.group_exists = AsyncMock(return_value=False)
        svc.get_group = AsyncMock()
        svc.create_group = AsyncMock(return_value=10)
        yield svc


@pytest.fixture
def mock_plant_service():
    with patch("plantcare.services.temporary_service.PlantService") as svc:
        svc.plant_exists = AsyncMock(return_value=False)
        svc.count_group_plants = AsyncMock(return_value=0)
        svc.get_plant = AsyncMock()
        svc.create_plant = AsyncMock(return_value=20)
        yield svc


# ============================================================================
# Tests for step control
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestStepControl:
    """Test reset and step changes."""

    async def test_cancel_mid_flow(self, mock_db, mock_storage):
        """✅ Reset clears data and message ID and returns to START."""
        draft = GroupDraft(user_id=1, title="Цветы", description="Комнатные")
        temp = make_temporary(Step.ADD_GROUP_WATERING_INTERVAL, draft, message_id=42)
        mock_storage["get"].return_value = temp

        result = await TemporaryService.reset_temporary(mock_db, TELEGRAM_ID)

        assert result.current_step is Step.START
        assert result.data is None
        assert result.message_id is None
        mock_storage["update"].assert_awaited_once_with(mock_db, temp)

    async def test_reset_to_main_menu(self, mock_db, mock_storage):
        """✅ Reset to an explicit step."""
        mock_storage["get"].return_value = make_temporary(Step.MANAGE_GROUP_ACTION)

        result = await TemporaryService.reset_temporary(mock_db, TELEGRAM_ID, step=Step.MAIN_MENU)

        assert result.current_step is Step.MAIN_MENU

    async def test_set_step_keeps_draft(self, mock_db, mock_storage):
        """✅ Going back keeps the draft."""
        draft = GroupDraft(user_id=1, title="Цветы")
        mock_storage["get"].return_value = make_temporary(Step.ADD_GROUP_DESCRIPTION, draft, message_id=7)

        result = await TemporaryService.set_temporary_step(mock_db, TELEGRAM_ID, Step.ADD_GROUP_TITLE)

        assert result.current_step is Step.ADD_GROUP_TITLE
        assert result.get_group_draft() == draft
        assert result.message_id == 7


# ============================================================================
# Tests for group creation wizard
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestGroupWizard:
    """Test group creation transitions."""

    async def test_title_accepted(self, mock_db, mock_storage, mock_group_service):
        """✅ New title → description step, message ID cleared."""
        temp = make_temporary(Step.ADD_GROUP_TITLE, message_id=42)
        mock_storage["get"].return_value = temp

        draft = await TemporaryService.add_group_title(mock_db, TELEGRAM_ID, "Цветы")

        assert draft.title == "Цветы"
        assert draft.user_id == 1
        assert temp.current_step is Step.ADD_GROUP_DESCRIPTION
        assert temp.message_id is None
        assert temp.get_group_draft().title == "Цветы"
        mock_group_service.group_exists.assert_awaited_once_with(mock_db, 1, "Цветы")

    async def test_duplicate_title(self, mock_db, mock_storage, mock_group_service):
        """❌ Existing title → GroupAlreadyExistsError, step stays."""
        temp = make_temporary(Step.ADD_GROUP_TITLE, message_id=42)
        mock_storage["get"].return_value = temp
        mock_group_service.group_exists.return_value = True

        with pytest.raises(GroupAlreadyExistsError):
            await TemporaryService.add_group_title(mock_db, TELEGRAM_ID, "Суккуленты")

        assert temp.current_step is Step.ADD_GROUP_TITLE
        assert temp.data is None
        mock_storage["update"].assert_not_awaited()

    async def test_description(self, mock_db, mock_storage):
        """✅ Description → calendar step, message ID cleared."""
        temp = make_temporary(Step.ADD_GROUP_DESCRIPTION, GroupDraft(user_id=1, title="Цветы"), message_id=42)
        mock_storage["get"].return_value = temp

        draft = await TemporaryService.add_group_description(mock_db, TELEGRAM_ID, "Комнатные")

        assert draft.description == "Комнатные"
        assert temp.current_step is Step.ADD_GROUP_LAST_WATERING_DATE
        assert temp.message_id is None

    async def test_last_watering_date_keeps_message(self, mock_db, mock_storage, moscow_time):
        """✅ Calendar pick → interval step, message ID kept."""
        temp = make_temporary(Step.ADD_GROUP_LAST_WATERING_DATE, GroupDraft(user_id=1, title="Цветы"), message_id=42)
        mock_storage["get"].return_value = temp

        draft = await TemporaryService.add_group_last_watering_date(mock_db, TELEGRAM_ID, moscow_time(2024, 6, 1))

        assert draft.last_watering_date == moscow_time(2024, 6, 1)
        assert temp.current_step is Step.ADD_GROUP_WATERING_INTERVAL
        assert temp.message_id == 42

    async def test_interval_computes_next_date(self, mock_db, mock_storage, moscow_time):
        """✅ Interval → next watering date clamped to today, confirm step."""
        draft = GroupDraft(user_id=1, title="Цветы", last_watering_date=moscow_time(2024, 6, 1))
        temp = make_temporary(Step.ADD_GROUP_WATERING_INTERVAL, draft, message_id=42)
        mock_storage["get"].return_value = temp

        result = await TemporaryService.add_group_watering_interval(mock_db, TELEGRAM_ID, 7)

        assert result.watering_interval == 7
        assert result.next_watering_date >= moscow_time(2024, 6, 8)
        assert result.next_watering_date == start_of_today()
        assert temp.current_step is Step.CONFIRM_ADD_GROUP

    async def test_interval_without_date(self, mock_db, mock_storage):
        """❌ Interval before the date → TemporaryDataError."""
        temp = make_temporary(Step.ADD_GROUP_WATERING_INTERVAL, GroupDraft(user_id=1, title="Цветы"))
        mock_storage["get"].return_value = temp

        with pytest.raises(TemporaryDataError):
            await TemporaryService.add_group_watering_interval(mock_db, TELEGRAM_ID, 7)

    async def test_wrong_draft_kind(self, mock_db, mock_storage):
        """❌ Plant draft at a group step → TemporaryDataError."""
        temp = make_temporary(Step.ADD_GROUP_DESCRIPTION, PlantDraft(user_id=1, title="Фикус"))
        mock_storage["get"].return_value = temp

        with pytest.raises(TemporaryDataError):
            await TemporaryService.add_group_description(mock_db, TELEGRAM_ID, "Комнатные")

    async def test_confirm_creates_and_resets(self, mock_db, mock_storage, mock_group_service, moscow_time):
        """✅ Confirm → group created, scratchpad reset to START."""
        draft = GroupDraft(
            user_id=1,
            title="Цветы",
            description="Комнатные",
            last_watering_date=moscow_time(2024, 6, 1),
            next_watering_date=moscow_time(2024, 6, 8),
            watering_interval=7
        )
        temp = make_temporary(Step.CONFIRM_ADD_GROUP, draft, message_id=42)
        mock_storage["get"].return_value = temp

        group = await TemporaryService.confirm_add_group(mock_db, TELEGRAM_ID)

        assert group.title == "Цветы"
        assert group.watering_interval == 7
        mock_group_service.create_group.assert_awaited_once_with(mock_db, group)
        assert temp.current_step is Step.START
        assert temp.data is None
        assert temp.message_id is None

    async def test_confirm_rechecks_title(self, mock_db, mock_storage, mock_group_service, moscow_time):
        """❌ Title taken meanwhile → nothing created."""
        draft = GroupDraft(
            user_id=1,
            title="Цветы",
            last_watering_date=moscow_time(2024, 6, 1),
            next_watering_date=moscow_time(2024, 6, 8),
            watering_interval=7
        )
        mock_storage["get"].return_value = make_temporary(Step.CONFIRM_ADD_GROUP, draft)
        mock_group_service.group_exists.return_value = True

        with pytest.raises(GroupAlreadyExistsError):
            await TemporaryService.confirm_add_group(mock_db, TELEGRAM_ID)

        mock_group_service.create_group.assert_not_awaited()


# ============================================================================
# Tests for plant creation wizard
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestPlantWizard:
    """Test plant creation transitions."""

    async def test_group_selected(self, mock_db, mock_storage, mock_group_service, mock_plant_service):
        """✅ Own scenario with room → photo question."""
        temp = make_temporary(Step.ADD_PLANT_GROUP, PlantDraft(user_id=1, title="Фикус"))
        mock_storage["get"].return_value = temp
        mock_group_service.get_group.return_value = MagicMock(id=3, user_id=1)

        draft = await TemporaryService.add_plant_group(mock_db, TELEGRAM_ID, 3)

        assert draft.group_id == 3
        assert temp.current_step is Step.ADD_PLANT_PHOTO_QUESTION

    async def test_foreign_group(self, mock_db, mock_storage, mock_group_service, mock_plant_service):
        """❌ Scenario of another user → GroupNotFoundError."""
        temp = make_temporary(Step.ADD_PLANT_GROUP, PlantDraft(user_id=1, title="Фикус"))
        mock_storage["get"].return_value = temp
        mock_group_service.get_group.return_value = MagicMock(id=3, user_id=2)

        with pytest.raises(GroupNotFoundError):
            await TemporaryService.add_plant_group(mock_db, TELEGRAM_ID, 3)

        assert temp.current_step is Step.ADD_PLANT_GROUP

    async def test_group_full(self, mock_db, mock_storage, mock_group_service, mock_plant_service):
        """❌ Scenario at the plant limit → PlantsLimitExceededError."""
        mock_storage["get"].return_value = make_temporary(Step.ADD_PLANT_GROUP, PlantDraft(user_id=1, title="Фикус"))
        mock_group_service.get_group.return_value = MagicMock(id=3, user_id=1)
        mock_plant_service.count_group_plants.return_value = 50

        with pytest.raises(PlantsLimitExceededError):
            await TemporaryService.add_plant_group(mock_db, TELEGRAM_ID, 3)

    async def test_duplicate_plant(self, mock_db, mock_storage, mock_group_service, mock_plant_service):
        """❌ Title already used in the scenario → PlantAlreadyExistsError."""
        mock_storage["get"].return_value = make_temporary(Step.ADD_PLANT_GROUP, PlantDraft(user_id=1, title="Фикус"))
        mock_group_service.get_group.return_value = MagicMock(id=3, user_id=1)
        mock_plant_service.plant_exists.return_value = True

        with pytest.raises(PlantAlreadyExistsError):
            await TemporaryService.add_plant_group(mock_db, TELEGRAM_ID, 3)

        mock_storage["update"].assert_not_awaited()

    async def test_photo_clears_message(self, mock_db, mock_storage):
        """✅ Photo stored, confirm step, message ID cleared."""
        temp = make_temporary(Step.ADD_PLANT_PHOTO, PlantDraft(user_id=1, group_id=3, title="Фикус"), message_id=42)
        mock_storage["get"].return_value = temp

        draft = await TemporaryService.add_plant_photo(mock_db, TELEGRAM_ID, b"photo")

        assert draft.photo == b"photo"
        assert temp.current_step is Step.CONFIRM_ADD_PLANT
        assert temp.message_id is None

    async def test_confirm_creates_plant(self, mock_db, mock_storage, mock_plant_service):
        """✅ Confirm → plant created, scratchpad reset."""
        temp = make_temporary(Step.CONFIRM_ADD_PLANT, PlantDraft(user_id=1, group_id=3, title="Фикус"))
        mock_storage["get"].return_value = temp

        plant = await TemporaryService.confirm_add_plant(mock_db, TELEGRAM_ID)

        assert plant.group_id == 3
        mock_plant_service.create_plant.assert_awaited_once_with(mock_db, plant)
        assert temp.current_step is Step.START


# ============================================================================
# Tests for management selection
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
class TestManagement:
    """Test loading entities into the scratchpad."""

    async def test_manage_group(self, mock_db, mock_storage, mock_group_service, make_group):
        """✅ Own scenario → snapshot stored, action step."""
        temp = make_temporary(Step.MANAGE_GROUP)
        mock_storage["get"].return_value = temp
        mock_group_service.get_group.return_value = make_group(group_id=3)

        group = await TemporaryService.manage_group(mock_db, TELEGRAM_ID, 3)

        assert group.id == 3
        assert temp.current_step is Step.MANAGE_GROUP_ACTION
        assert temp.get_group_draft().id == 3

    async def test_manage_foreign_plant(self, mock_db, mock_storage, mock_plant_service, make_plant):
        """❌ Plant of another user → PlantNotFoundError."""
        mock_storage["get"].return_value = make_temporary(Step.MANAGE_PLANT)
        mock_plant_service.get_plant.return_value = make_plant(plant_id=5, user_id=2)

        with pytest.raises(PlantNotFoundError):
            await TemporaryService.manage_plant(mock_db, TELEGRAM_ID, 5)
