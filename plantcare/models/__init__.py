"""Models package initialization."""
from plantcare.models.user import User
from plantcare.models.group import Group
from plantcare.models.plant import Plant
from plantcare.models.temporary import Temporary, Step
from plantcare.models.notification import Notification
from plantcare.models.drafts import GroupDraft, PlantDraft

__all__ = [
    "User",
    "Group",
    "Plant",
    "Temporary",
    "Step",
    "Notification",
    "GroupDraft",
    "PlantDraft"
]
