"""Services package initialization."""
from plantcare.services.user_service import UserService
from plantcare.services.group_service import GroupService
from plantcare.services.plant_service import PlantService
from plantcare.services.temporary_service import TemporaryService
from plantcare.services.notification_service import NotificationService

__all__ = [
    "UserService",
    "GroupService",
    "PlantService",
    "TemporaryService",
    "NotificationService"
]
