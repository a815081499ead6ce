"""Temporary model: per-user wizard scratchpad and the wizard steps."""
import enum
from typing import Optional, Union
from pydantic import ValidationError
from sqlalchemy import Column, Integer, BigInteger, Text, ForeignKey
from plantcare.core.database import Base, AwareDateTime, utcnow
from plantcare.core.exceptions import TemporaryDataError
from plantcare.models.drafts import GroupDraft, PlantDraft


class Step(enum.IntEnum):
    """Wizard states. Values are persisted, so only append new members."""

    START = 0
    ADD_GROUP_TITLE = 1
    ADD_GROUP_DESCRIPTION = 2
    ADD_GROUP_LAST_WATERING_DATE = 3
    ADD_GROUP_WATERING_INTERVAL = 4
    CONFIRM_ADD_GROUP = 5
    ADD_PLANT_TITLE = 6
    ADD_PLANT_DESCRIPTION = 7
    ADD_PLANT_GROUP = 8
    ADD_PLANT_PHOTO_QUESTION = 9
    ADD_PLANT_PHOTO = 10
    CONFIRM_ADD_PLANT = 11
    MANAGE_PLANTS_CHOOSE_GROUP = 12
    MANAGE_PLANT = 13
    MANAGE_PLANT_ACTION = 14
    MANAGE_PLANT_REMOVAL = 15
    MANAGE_PLANT_CHANGE = 16
    CHANGE_PLANT_TITLE = 17
    CHANGE_PLANT_DESCRIPTION = 18
    CHANGE_PLANT_GROUP = 19
    CHANGE_PLANT_PHOTO = 20
    MANAGE_GROUP = 21
    MANAGE_GROUP_ACTION = 22
    MANAGE_GROUP_REMOVAL = 23
    MANAGE_GROUP_CHANGE = 24
    CHANGE_GROUP_TITLE = 25
    CHANGE_GROUP_DESCRIPTION = 26
    CHANGE_GROUP_LAST_WATERING_DATE = 27
    CHANGE_GROUP_WATERING_INTERVAL = 28
    MANAGE_GROUP_SEE_PLANTS = 29
    MAIN_MENU = 30


class Temporary(Base):
    """Exactly one row per user holding the current wizard step and draft."""

    __tablename__ = "temporary"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    step = Column(Integer, default=int(Step.START), nullable=False)
    message_id = Column(BigInteger, nullable=True)
    data = Column(Text, nullable=True)
    created_at = Column(AwareDateTime, default=utcnow, nullable=False)
    updated_at = Column(AwareDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def current_step(self) -> Step:
        return Step(self.step)

    def set_draft(self, draft: Optional[Union[GroupDraft, PlantDraft]]) -> None:
        self.data = draft.model_dump_json() if draft is not None else None

    def get_group_draft(self) -> GroupDraft:
        """Decode data as a group snapshot.

        Raises:
            TemporaryDataError: data is empty or is not a group snapshot
        """
        return self._decode(GroupDraft)

    def get_plant_draft(self) -> PlantDraft:
        """Decode data as a plant snapshot.

        Raises:
            TemporaryDataError: data is empty or is not a plant snapshot
        """
        return self._decode(PlantDraft)

    def _decode(self, model):
        if not self.data:
            raise TemporaryDataError(f"Temporary {self.id} has no data at step {self.step}")
        try:
            return model.model_validate_json(self.data)
        except ValidationError as e:
            raise TemporaryDataError(
                f"Temporary {self.id} data is not a valid {model.__name__} at step {self.step}"
            ) from e

    def __repr__(self) -> str:
        return f"<Temporary id={self.id} user_id={self.user_id} step={self.step}>"
