"""FastAPI application: entry point for the scene conflict service."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, HTTPException, Query

from scene_conflicts.config import settings
from scene_conflicts.domain.bus import EventBus
from scene_conflicts.domain.events import SceneSaved
from scene_conflicts.domain.handlers import HandlerRegistry
from scene_conflicts.domain.models import (
    ConflictCheckRequest,
    ConflictCheckResult,
    Scene,
    SceneCreateRequest,
    SceneSaveResponse,
    SceneUpdateRequest,
    SceneWithConflicts,
    as_utc,
)
from scene_conflicts.repos.memory import SceneRepository
from scene_conflicts.services.conflicts import build_conflict_map, check_candidate

logger = logging.getLogger(__name__)

# Fields whose change can create or clear a conflict
_SCHEDULING_FIELDS = frozenset(
    {
        "scheduled_time",
        "duration_minutes",
        "expected_duration_minutes",
        "assigned_actors",
        "assigned_crew",
        "location",
    }
)
_NON_NULLABLE_FIELDS = frozenset({"title", "scene_number", "status"})


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging(settings.log_level)

app = FastAPI(title="Scene Conflict Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
scene_repo = SceneRepository()

handler_registry = HandlerRegistry(bus=event_bus, scene_repo=scene_repo)


def _get_scoped_scene(scene_id: int, company_id: int) -> Scene:
    scene = scene_repo.get(scene_id)
    if scene is None:
        raise HTTPException(status_code=404, detail="Scene not found")
    if scene.company_id != company_id:
        raise HTTPException(
            status_code=403, detail="You don't have access to this scene"
        )
    return scene


def _check(candidate: Scene) -> ConflictCheckResult:
    pool = scene_repo.list_for_company(candidate.company_id)
    return check_candidate(candidate, pool)


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/scenes/check-conflicts", response_model=ConflictCheckResult)
def check_scene_conflicts(payload: ConflictCheckRequest) -> ConflictCheckResult:
    """Report what a new or edited scene would collide with, without saving it."""
    candidate = Scene(
        id=payload.scene_id,
        **payload.model_dump(exclude={"scene_id"}),
    )
    return _check(candidate)


@app.get("/scenes/conflicts", response_model=list[SceneWithConflicts])
def list_scenes_with_conflicts(
    company_id: int,
    show_ids: list[int] | None = Query(default=None),
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[SceneWithConflicts]:
    """Return the calendar's scheduled scenes, each with its conflicts."""
    scenes = scene_repo.list_for_company(
        company_id,
        show_ids=show_ids,
        start=as_utc(start_date),
        end=as_utc(end_date),
    )
    conflict_map = build_conflict_map([s.id for s in scenes], company_id, scene_repo)
    return [
        SceneWithConflicts(
            scene=scene,
            has_conflicts=scene.id in conflict_map,
            conflicts=conflict_map.get(scene.id, []),
        )
        for scene in scenes
    ]


@app.post("/scenes", response_model=SceneSaveResponse, status_code=201)
def create_scene(payload: SceneCreateRequest) -> SceneSaveResponse:
    """Save a new scene; conflicts are reported but never block the save."""
    candidate = Scene(**payload.model_dump())
    result = _check(candidate)

    scene = scene_repo.add(candidate)
    logger.info("Created scene %s for company %s", scene.id, scene.company_id)
    event_bus.publish(SceneSaved(scene_id=scene.id, company_id=scene.company_id))

    return SceneSaveResponse(
        scene=scene, conflicts=result if result.has_conflicts else None
    )


@app.patch("/scenes/{scene_id}", response_model=SceneSaveResponse)
def update_scene(
    scene_id: int, company_id: int, payload: SceneUpdateRequest
) -> SceneSaveResponse:
    """Apply a partial update, checking the merged scene when scheduling changes."""
    existing = _get_scoped_scene(scene_id, company_id)
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field not in _NON_NULLABLE_FIELDS
    }

    result: ConflictCheckResult | None = None
    if _SCHEDULING_FIELDS & changes.keys():
        merged = Scene(**{**existing.model_dump(), **changes})
        result = _check(merged)

    scene = scene_repo.update(scene_id, changes)
    logger.info("Updated scene %s (%s)", scene_id, ", ".join(sorted(changes)) or "no changes")
    event_bus.publish(SceneSaved(scene_id=scene_id, company_id=company_id))

    return SceneSaveResponse(
        scene=scene,
        conflicts=result if result is not None and result.has_conflicts else None,
    )


@app.get("/scenes/{scene_id}", response_model=Scene)
def get_scene(scene_id: int, company_id: int) -> Scene:
    """Return a single scene by id."""
    return _get_scoped_scene(scene_id, company_id)


@app.delete("/scenes/{scene_id}", status_code=200)
def delete_scene(scene_id: int, company_id: int) -> dict:
    """Delete a scene."""
    _get_scoped_scene(scene_id, company_id)
    scene_repo.delete(scene_id)
    return {"status": "deleted"}
