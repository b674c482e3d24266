"""In-memory scene store."""

from __future__ import annotations

import itertools
import json
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from scene_conflicts.domain.models import Scene

_ASSIGNMENT_FIELDS = ("assigned_actors", "assigned_crew")


def _serialize_assignments(values: dict[str, Any]) -> dict[str, Any]:
    """Store assignment lists as JSON text, the way the scenes table holds them."""
    out = dict(values)
    for field in _ASSIGNMENT_FIELDS:
        if isinstance(out.get(field), (list, tuple, set)):
            out[field] = json.dumps(list(out[field]))
    return out


class SceneRepository:
    """Dict-backed store for Scene instances, keyed by integer id."""

    def __init__(self) -> None:
        self._store: dict[int, Scene] = {}
        self._ids = itertools.count(1)

    def _next_id(self) -> int:
        scene_id = next(self._ids)
        while scene_id in self._store:
            scene_id = next(self._ids)
        return scene_id

    def add(self, scene: Scene) -> Scene:
        """Store *scene*, assigning an id when it has none."""
        data = _serialize_assignments(scene.model_dump())
        if data["id"] is None:
            data["id"] = self._next_id()
        stored = Scene(**data)
        self._store[stored.id] = stored
        return stored

    def get(self, scene_id: int) -> Scene | None:
        return self._store.get(scene_id)

    def update(self, scene_id: int, changes: dict[str, Any]) -> Scene | None:
        """Apply *changes* to a stored scene; returns ``None`` if it is unknown."""
        current = self._store.get(scene_id)
        if current is None:
            return None
        data = current.model_dump()
        data.update(_serialize_assignments(changes))
        data["id"] = scene_id
        updated = Scene(**data)
        self._store[scene_id] = updated
        return updated

    def delete(self, scene_id: int) -> None:
        self._store.pop(scene_id, None)

    def list_all(self) -> list[Scene]:
        return list(self._store.values())

    def list_by_ids(self, scene_ids: Iterable[int], company_id: int) -> list[Scene]:
        """Return the scheduled scenes among *scene_ids* that belong to the company."""
        wanted = set(scene_ids)
        return [
            s
            for s in self._store.values()
            if s.id in wanted and s.company_id == company_id and s.scheduled_time
        ]

    def max_duration_minutes(self, company_id: int) -> int:
        """Return the longest positive duration on the company's scheduled scenes."""
        return max(
            (
                minutes
                for s in self._store.values()
                if s.company_id == company_id and s.scheduled_time is not None
                for minutes in (s.duration_minutes, s.expected_duration_minutes)
                if minutes is not None and minutes > 0
            ),
            default=0,
        )

    def list_for_company(
        self,
        company_id: int,
        *,
        show_ids: Sequence[int] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Scene]:
        """Return the company's scheduled scenes ordered by time.

        *start* is inclusive and *end* exclusive; both bound ``scheduled_time``.
        """
        scenes = [
            s
            for s in self._store.values()
            if s.company_id == company_id
            and s.scheduled_time is not None
            and (not show_ids or s.show_id in show_ids)
            and (start is None or s.scheduled_time >= start)
            and (end is None or s.scheduled_time < end)
        ]
        return sorted(scenes, key=lambda s: (s.scheduled_time, s.id))


# ---------------------------------------------------------------------------
# Seed data – a few scenes useful for trying the conflict endpoints
# ---------------------------------------------------------------------------


def _seed_scenes(repo: SceneRepository) -> None:
    day = datetime(2025, 3, 1, tzinfo=timezone.utc)

    repo.add(
        Scene(
            id=10,
            company_id=1,
            show_id=1,
            scene_number="10",
            title="Kitchen argument",
            location="Stage 4",
            scheduled_time=day.replace(hour=14),
            duration_minutes=60,
            assigned_actors=[7],
        )
    )
    repo.add(
        Scene(
            id=11,
            company_id=1,
            show_id=1,
            scene_number="11",
            title="Hallway chase",
            scheduled_time=day.replace(hour=14, minute=30),
            duration_minutes=60,
            assigned_actors=[7, 8],
        )
    )
    repo.add(
        Scene(
            id=12,
            company_id=2,
            show_id=2,
            scene_number="1",
            title="Opening",
            location="Stage 4",
            scheduled_time=day.replace(hour=14),
            duration_minutes=60,
            assigned_actors=[7],
        )
    )
    repo.add(
        Scene(
            id=13,
            company_id=1,
            show_id=1,
            scene_number="13",
            title="Unscheduled pickup",
            assigned_actors=[7],
        )
    )


def create_scene_repository() -> SceneRepository:
    """Return a SceneRepository pre-loaded with sample data."""
    repo = SceneRepository()
    _seed_scenes(repo)
    return repo
