"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from scene_conflicts.config import Settings
from scene_conflicts.domain.bus import EventBus
from scene_conflicts.domain.events import SceneConflictsDetected, SceneSaved
from scene_conflicts.repos.memory import SceneRepository
from scene_conflicts.services.conflicts import check_candidate
from scene_conflicts.services.describe import describe_conflict

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the scene store."""

    def __init__(
        self,
        bus: EventBus,
        scene_repo: SceneRepository,
        settings: Settings | None = None,
    ) -> None:
        self.bus = bus
        self.scene_repo = scene_repo
        self.settings = settings
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(SceneSaved, self.on_scene_saved)
        self.bus.subscribe(SceneConflictsDetected, self.on_conflicts_detected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_scene_saved(self, event: SceneSaved) -> None:
        stored = self.scene_repo.get(event.scene_id)
        if stored is None or stored.scheduled_time is None:
            return

        pool = self.scene_repo.list_for_company(event.company_id)
        result = check_candidate(stored, pool, self.settings)
        if result.has_conflicts:
            self.bus.publish(
                SceneConflictsDetected(
                    scene_id=event.scene_id, conflicts=result.conflicts
                )
            )

    def on_conflicts_detected(self, event: SceneConflictsDetected) -> None:
        for record in event.conflicts:
            logger.warning("Scene %s: %s", event.scene_id, describe_conflict(record))
