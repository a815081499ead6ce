"""Shared pytest fixtures for plant care bot tests."""
import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:test-token")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TIMEZONE"] = "Europe/Moscow"
os.environ["SEND_HOUR"] = "12"

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
import pytz

from plantcare.models import Group, Plant, User, Temporary, Step

MOSCOW = pytz.timezone("Europe/Moscow")


def local_dt(year, month, day, hour=0, minute=0) -> datetime:
    """Aware datetime in the configured (Moscow) timezone."""
    return MOSCOW.localize(datetime(year, month, day, hour, minute))


def create_group(
    group_id: int = 1,
    user_id: int = 1,
    title: str = "Цветы",
    description: str = "Комнатные",
    last_watering_date: datetime = None,
    next_watering_date: datetime = None,
    watering_interval: int = 7
) -> Group:
    """Factory for detached Group instances."""
    last_watering_date = last_watering_date or local_dt(2024, 6, 1)
    return Group(
        id=group_id,
        user_id=user_id,
        title=title,
        description=description,
        last_watering_date=last_watering_date,
        next_watering_date=next_watering_date or local_dt(2024, 6, 8),
        watering_interval=watering_interval
    )


def create_plant(plant_id: int = 1, group_id: int = 1, user_id: int = 1, title: str = "Фикус", photo=None) -> Plant:
    """Factory for detached Plant instances."""
    return Plant(
        id=plant_id,
        group_id=group_id,
        user_id=user_id,
        title=title,
        description="",
        photo=photo
    )


@pytest.fixture
def sample_user():
    return User(id=1, telegram_id=5559999, username="gardener", firstname="Анна", is_bot=False)


@pytest.fixture
def sample_group():
    return create_group()


@pytest.fixture
def sample_temporary():
    return Temporary(id=1, user_id=1, step=int(Step.START), message_id=None, data=None)


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.__aenter__.return_value = db
    db.__aexit__.return_value = None
    return db


@pytest.fixture
def utc_noon():
    return datetime(2024, 6, 10, 9, 0, tzinfo=timezone.utc)  # 12:00 Moscow


@pytest.fixture
def make_group():
    return create_group


@pytest.fixture
def make_plant():
    return create_plant


@pytest.fixture
def moscow_time():
    return local_dt
