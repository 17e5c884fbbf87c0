"""Collector service configuration"""

import logging
from datetime import timedelta, timezone, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.models import DEFAULT_GAMES

logger = logging.getLogger(__name__)

# === Path Configuration ===
COLLECTOR_DIR = Path(__file__).parent.parent
BACKEND_DIR = COLLECTOR_DIR.parent
DATA_DIR = BACKEND_DIR / "data"


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


class CollectorSettings(BaseSettings):
    """Collector settings"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Upstream games, in priority order
    games: str = Field(default=",".join(DEFAULT_GAMES), description="Comma-separated game IDs")
    game_sources: dict[str, str] = Field(
        default_factory=dict, description="Game ID -> URL returning {players, lobbies}"
    )

    # Polling
    poll_interval: float = Field(default=300.0, gt=0, description="Seconds between cycles")
    fetch_timeout: float = Field(default=10.0, gt=0, description="Per-cycle fetch timeout (s)")

    # Tracker parameters
    notification_cooldown: float = Field(
        default=120.0, ge=0, description="Seconds before an emptied lobby may alert again"
    )
    session_min_minutes: int = Field(default=1, ge=0, description="Session noise floor")
    snapshot_cap: int = Field(default=10_000, gt=0)
    session_cap: int = Field(default=10_000, gt=0)
    activity_cap: int = Field(default=10_000, gt=0)
    timezone: str = Field(default="UTC", description="IANA zone for hour/day buckets")

    # Storage
    storage_backend: Literal["json", "postgres"] = Field(default="json")
    data_dir: Path = Field(default=DATA_DIR, description="JSON document directory")
    database_url: str = Field(default="", description="PostgreSQL database URL")

    # Delivery
    notification_webhook_url: str = Field(default="", description="Optional lobby event webhook")

    # Health server
    health_host: str = Field(default="0.0.0.0")
    health_port: int = Field(default=8080)

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if v and not v.startswith("postgresql://"):
            raise ValueError("DATABASE_URL must start with 'postgresql://'")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            resolve_timezone(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone '{v}'") from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @model_validator(mode="after")
    def validate_storage(self) -> "CollectorSettings":
        if self.storage_backend == "postgres" and not self.database_url:
            raise ValueError("DATABASE_URL is required when STORAGE_BACKEND=postgres")
        return self

    @property
    def game_list(self) -> list[str]:
        games = [g.strip() for g in self.games.split(",") if g.strip()]
        return games or list(DEFAULT_GAMES)

    @property
    def tzinfo(self) -> tzinfo:
        return resolve_timezone(self.timezone)

    @property
    def cooldown(self) -> timedelta:
        return timedelta(seconds=self.notification_cooldown)


@lru_cache
def get_settings() -> CollectorSettings:
    """Get cached settings instance"""
    return CollectorSettings()
