"""Domain models for the scene conflict service."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class ConflictType(StrEnum):
    ACTOR_DOUBLE_BOOKED = "actor_double_booked"
    CREW_DOUBLE_BOOKED = "crew_double_booked"
    LOCATION_DOUBLE_BOOKED = "location_double_booked"


class SceneStatus(StrEnum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


def as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Scene(BaseModel):
    """A scheduled production event as supplied by the scene store.

    ``assigned_actors`` and ``assigned_crew`` hold whatever the store holds,
    usually a JSON-encoded list of user ids. They are decoded lazily by
    :mod:`scene_conflicts.services.resources`, which tolerates garbage.
    """

    id: int | None = None
    company_id: int
    show_id: int | None = None
    scene_number: str = ""
    title: str = ""
    description: str | None = None
    location: str | None = None
    scheduled_time: datetime | None = None
    duration_minutes: int | None = None
    expected_duration_minutes: int | None = None
    assigned_actors: Any = None
    assigned_crew: Any = None
    status: SceneStatus = SceneStatus.PLANNED
    notes: str | None = None

    @field_validator("scheduled_time")
    @classmethod
    def _naive_is_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class TimeWindow(BaseModel):
    """Half-open interval ``[start, end)`` a scene occupies."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _end_not_before_start(self) -> TimeWindow:
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)


class ConflictRecord(BaseModel):
    """One collision between a scene and another scene."""

    conflict_type: ConflictType
    scene_id: int | None = None
    other_scene_id: int | None
    other_scene_title: str
    other_scene_number: str
    other_show_id: int | None = None
    resource_ids: list[int] = Field(default_factory=list)
    overlap_window: TimeWindow


class ConflictCheckResult(BaseModel):
    has_conflicts: bool
    conflicts: list[ConflictRecord] = Field(default_factory=list)

    @classmethod
    def from_records(cls, records: list[ConflictRecord]) -> ConflictCheckResult:
        return cls(has_conflicts=bool(records), conflicts=records)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class _SceneFields(BaseModel):
    show_id: int | None = None
    scene_number: str = ""
    title: str = ""
    description: str | None = None
    location: str | None = None
    scheduled_time: datetime | None = None
    duration_minutes: int | None = Field(default=None, gt=0)
    expected_duration_minutes: int | None = Field(default=None, gt=0)
    assigned_actors: list[int] | None = None
    assigned_crew: list[int] | None = None
    notes: str | None = None


class SceneCreateRequest(_SceneFields):
    company_id: int
    title: str = Field(min_length=1)


class SceneUpdateRequest(_SceneFields):
    """Partial update: only fields present in the request body are applied."""

    title: str | None = Field(default=None, min_length=1)
    scene_number: str | None = None
    status: SceneStatus | None = None


class ConflictCheckRequest(_SceneFields):
    """A would-be scene to validate before it is saved."""

    company_id: int
    scene_id: int | None = None


class SceneSaveResponse(BaseModel):
    scene: Scene
    conflicts: ConflictCheckResult | None = None


class SceneWithConflicts(BaseModel):
    scene: Scene
    has_conflicts: bool
    conflicts: list[ConflictRecord] = Field(default_factory=list)
