"""Domain exceptions raised by the service layer."""


class PlantCareError(Exception):
    """Base class for domain errors."""
    pass


class NotFoundError(PlantCareError):
    """A single-row lookup found nothing."""
    pass


class UserNotFoundError(NotFoundError):
    pass


class GroupNotFoundError(NotFoundError):
    pass


class PlantNotFoundError(NotFoundError):
    pass


class TemporaryNotFoundError(NotFoundError):
    pass


class AlreadyExistsError(PlantCareError):
    """A title is already taken within its scope."""
    pass


class GroupAlreadyExistsError(AlreadyExistsError):
    """The user already has a watering scenario with this title."""
    pass


class PlantAlreadyExistsError(AlreadyExistsError):
    """The watering scenario already has a plant with this title."""
    pass


class LimitExceededError(PlantCareError):
    """A per-user or per-group limit has been reached."""
    pass


class GroupsLimitExceededError(LimitExceededError):
    pass


class PlantsLimitExceededError(LimitExceededError):
    pass


class PlantOwnershipError(PlantCareError):
    """Plant owner differs from the owner of its watering scenario."""
    pass


class TemporaryDataError(PlantCareError):
    """Wizard scratchpad data is missing or does not match the current step."""
    pass
