"""Core configuration management using Pydantic settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator, field_validator
from typing import Optional
import pytz


# Valid log levels
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/plantcare.db"
    db_pool_size: int = 10  # Max idle connections kept in the pool
    db_max_overflow: int = 20  # Max open = pool size + overflow
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600  # Max connection lifetime (seconds)

    # Telegram
    telegram_bot_token: str
    telegram_poll_timeout: int = 10

    # Monitoring API
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_file_path: Optional[str] = None

    # Notifications
    timezone: str = "Europe/Moscow"
    send_hour: int = 12
    notify_limit: int = 100
    notify_offset: int = 0
    notify_crons_count: int = 1
    notify_check_interval: int = 60  # seconds

    # Limits
    groups_per_user_limit: int = 5
    plants_per_group_limit: int = 50
    title_max_length: int = 50
    description_max_length: int = 500

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        upper_v = v.upper()
        if upper_v not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")
        return upper_v

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate that timezone is a known IANA timezone."""
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Invalid timezone: {v}. Must be a valid IANA timezone.")
        return v

    @field_validator('send_hour')
    @classmethod
    def validate_send_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError(f"send_hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode='after')
    def validate_config(self) -> 'Settings':
        """Validate configuration after all fields are set."""
        if self.notify_limit < 1:
            raise ValueError("notify_limit must be positive")
        if self.notify_offset < 0:
            raise ValueError("notify_offset must be non-negative")
        if self.notify_crons_count < 1:
            raise ValueError("notify_crons_count must be at least 1")
        if self.notify_check_interval < 1:
            raise ValueError("notify_check_interval must be at least 1 second")
        if self.groups_per_user_limit < 1 or self.plants_per_group_limit < 1:
            raise ValueError("Group and plant limits must be positive")
        return self


# Global settings instance
settings = Settings()
