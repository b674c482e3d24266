"""Domain events emitted when scenes change."""

from __future__ import annotations

from pydantic import BaseModel

from scene_conflicts.domain.models import ConflictRecord


class SceneSaved(BaseModel):
    """Fired after a scene is created or updated in the store."""

    scene_id: int
    company_id: int


class SceneConflictsDetected(BaseModel):
    """Fired when a saved scene collides with other scenes of its company."""

    scene_id: int
    conflicts: list[ConflictRecord]
