"""Service for detecting scheduling conflicts between scenes.

Two scenes conflict when they belong to the same company, their time windows
overlap, and they claim the same actor, crew member or location. Conflicts
are recomputed on every call; nothing here is cached or stored.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import Protocol

from scene_conflicts.config import Settings, get_settings
from scene_conflicts.domain.models import (
    ConflictCheckResult,
    ConflictRecord,
    ConflictType,
    Scene,
    TimeWindow,
)
from scene_conflicts.services.resources import actors_of, crew_of, location_key_of
from scene_conflicts.services.windows import intersection, overlaps, window_of

logger = logging.getLogger(__name__)


class SceneStore(Protocol):
    """Read contract the bulk builder needs from the scene store.

    The list methods return scheduled scenes only, already scoped to the
    company. ``max_duration_minutes`` is the longest positive duration
    recorded on any of those scenes, 0 when none has one.
    """

    def list_by_ids(self, scene_ids: Iterable[int], company_id: int) -> list[Scene]: ...

    def max_duration_minutes(self, company_id: int) -> int: ...

    def list_for_company(
        self,
        company_id: int,
        *,
        show_ids: Sequence[int] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Scene]: ...


def _record(
    conflict_type: ConflictType,
    scene: Scene,
    other: Scene,
    overlap: TimeWindow,
    resource_ids: Iterable[int] = (),
) -> ConflictRecord:
    return ConflictRecord(
        conflict_type=conflict_type,
        scene_id=scene.id,
        other_scene_id=other.id,
        other_scene_title=other.title,
        other_scene_number=other.scene_number,
        other_show_id=other.show_id,
        resource_ids=sorted(resource_ids),
        overlap_window=overlap,
    )


def evaluate(
    scene: Scene, other: Scene, settings: Settings | None = None
) -> list[ConflictRecord]:
    """Return every conflict between *scene* and *other*, seen from *scene*.

    Each conflict type gets its own record, so a pair sharing both an actor
    and a location yields two records.
    """
    if scene.id is not None and scene.id == other.id:
        return []
    if scene.company_id != other.company_id:
        return []

    window = window_of(scene, settings)
    other_window = window_of(other, settings)
    if window is None or other_window is None:
        return []
    if not overlaps(window, other_window):
        return []

    overlap = intersection(window, other_window)
    records: list[ConflictRecord] = []

    shared_actors = actors_of(scene) & actors_of(other)
    if shared_actors:
        records.append(
            _record(ConflictType.ACTOR_DOUBLE_BOOKED, scene, other, overlap, shared_actors)
        )

    shared_crew = crew_of(scene) & crew_of(other)
    if shared_crew:
        records.append(
            _record(ConflictType.CREW_DOUBLE_BOOKED, scene, other, overlap, shared_crew)
        )

    location = location_key_of(scene, settings)
    if location is not None and location == location_key_of(other, settings):
        records.append(
            _record(ConflictType.LOCATION_DOUBLE_BOOKED, scene, other, overlap)
        )

    return records


def check_candidate(
    candidate: Scene,
    scene_pool: Iterable[Scene],
    settings: Settings | None = None,
) -> ConflictCheckResult:
    """Check a new or edited scene against the other scenes in scope.

    The pool is expected to be pre-scoped by the caller; the candidate's own
    id is skipped if present. Results follow pool order.
    """
    if candidate.scheduled_time is None:
        return ConflictCheckResult.from_records([])

    records: list[ConflictRecord] = []
    for other in scene_pool:
        records.extend(evaluate(candidate, other, settings))
    return ConflictCheckResult.from_records(records)


def conflict_map_for(
    targets: Iterable[Scene],
    pool: Sequence[Scene],
    settings: Settings | None = None,
) -> dict[int, list[ConflictRecord]]:
    """Map each target's id to its conflicts against *pool*.

    Targets without conflicts are left out of the map.
    """
    conflict_map: dict[int, list[ConflictRecord]] = {}
    for target in targets:
        if target.id is None:
            continue
        result = check_candidate(target, pool, settings)
        if result.has_conflicts:
            conflict_map[target.id] = result.conflicts
    return conflict_map


def build_conflict_map(
    scene_ids: Iterable[int],
    company_id: int,
    store: SceneStore,
    settings: Settings | None = None,
) -> dict[int, list[ConflictRecord]]:
    """Return conflicts for many scenes at once, keyed by scene id.

    Only *scene_ids* are fetched as targets, but they are compared against
    every scheduled scene of the company whose window could reach theirs,
    so a scene early in a month still sees one late in the previous month.
    """
    ids = list(dict.fromkeys(scene_ids))
    if not ids:
        return {}

    cfg = get_settings(settings)
    targets = store.list_by_ids(ids, company_id)
    windows = [w for w in (window_of(t, cfg) for t in targets) if w is not None]
    if not windows:
        return {}

    if cfg.comparison_padding_minutes:
        # a pool scene can only reach a target if it starts before the latest
        # target ends and no earlier than the longest scene of the company
        # before the earliest target starts
        reach = max(
            cfg.comparison_padding_minutes,
            cfg.default_duration_minutes,
            store.max_duration_minutes(company_id),
        )
        pool = store.list_for_company(
            company_id,
            start=min(w.start for w in windows) - timedelta(minutes=reach),
            end=max(w.end for w in windows),
        )
    else:
        pool = store.list_for_company(company_id)

    logger.debug(
        "Building conflict map for %d scenes against a pool of %d (company %s)",
        len(targets),
        len(pool),
        company_id,
    )
    return conflict_map_for(targets, pool, cfg)
