"""Runtime configuration for the scene conflict service."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

_PREFIX = "SCENE_CONFLICTS_"


def _env(name: str, default: str) -> str:
    return os.getenv(_PREFIX + name, default)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Policy values for conflict detection.

    Every field defaults from a ``SCENE_CONFLICTS_*`` environment variable so
    deployments can tune the policy without code changes.
    """

    default_duration_minutes: int = Field(
        default_factory=lambda: int(_env("DEFAULT_DURATION_MINUTES", "60")),
        gt=0,
        description="Duration assumed when a scene has no duration data",
    )
    comparison_padding_minutes: int = Field(
        default_factory=lambda: int(_env("COMPARISON_PADDING_MINUTES", "1440")),
        ge=0,
        description=(
            "How far before the earliest visible scene the bulk comparison "
            "pool reaches; 0 compares against the whole company"
        ),
    )
    collapse_location_whitespace: bool = Field(
        default_factory=lambda: _env_flag("COLLAPSE_LOCATION_WHITESPACE", True),
        description="Treat runs of whitespace inside a location as one space",
    )
    log_level: str = Field(
        default_factory=lambda: _env("LOG_LEVEL", "INFO").upper(),
    )


settings = Settings()


def get_settings(override: Settings | None = None) -> Settings:
    """Return *override* when given, else the process-wide settings."""
    return override if override is not None else settings
