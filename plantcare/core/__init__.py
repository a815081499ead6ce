"""Core package initialization."""
from plantcare.core.config import settings
from plantcare.core.database import Base, get_db, init_db

__all__ = ["settings", "Base", "get_db", "init_db"]
