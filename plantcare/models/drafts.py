"""Partially built entities carried by the wizard scratchpad.

Drafts are tagged with ``kind`` so a group snapshot never decodes as a plant
and vice versa. Photo bytes travel as base64 inside the JSON document.
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from plantcare.models.group import Group
from plantcare.models.plant import Plant


class GroupDraft(BaseModel):
    """Watering scenario under construction or being edited."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["group"] = "group"
    id: Optional[int] = None
    user_id: int
    title: str
    description: str = ""
    last_watering_date: Optional[datetime] = None
    next_watering_date: Optional[datetime] = None
    watering_interval: Optional[int] = Field(default=None, ge=1)

    @classmethod
    def from_group(cls, group: Group) -> "GroupDraft":
        return cls(
            id=group.id,
            user_id=group.user_id,
            title=group.title,
            description=group.description or "",
            last_watering_date=group.last_watering_date,
            next_watering_date=group.next_watering_date,
            watering_interval=group.watering_interval,
        )

    def to_group(self) -> Group:
        """Build an unsaved Group; every scheduling field must be filled in."""
        if self.last_watering_date is None or self.watering_interval is None or self.next_watering_date is None:
            raise ValueError(f"Group draft {self.title!r} is incomplete")
        return Group(
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            last_watering_date=self.last_watering_date,
            next_watering_date=self.next_watering_date,
            watering_interval=self.watering_interval,
        )


class PlantDraft(BaseModel):
    """Plant under construction or being edited."""

    model_config = ConfigDict(extra="forbid", ser_json_bytes="base64", val_json_bytes="base64")

    kind: Literal["plant"] = "plant"
    id: Optional[int] = None
    user_id: int
    group_id: Optional[int] = None
    title: str
    description: str = ""
    photo: Optional[bytes] = None

    @classmethod
    def from_plant(cls, plant: Plant) -> "PlantDraft":
        return cls(
            id=plant.id,
            user_id=plant.user_id,
            group_id=plant.group_id,
            title=plant.title,
            description=plant.description or "",
            photo=plant.photo,
        )

    def to_plant(self) -> Plant:
        if self.group_id is None:
            raise ValueError(f"Plant draft {self.title!r} has no group")
        return Plant(
            user_id=self.user_id,
            group_id=self.group_id,
            title=self.title,
            description=self.description,
            photo=self.photo,
        )
