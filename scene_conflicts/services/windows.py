"""Time windows occupied by scenes."""

from __future__ import annotations

from datetime import timedelta

from scene_conflicts.config import Settings, get_settings
from scene_conflicts.domain.models import Scene, TimeWindow


def effective_duration_minutes(scene: Scene, settings: Settings | None = None) -> int:
    """Return how long *scene* holds its resources, in minutes.

    The recorded duration wins over the expected one. Missing, zero and
    negative values fall through to the configured default so that two
    scenes booked at the same instant still overlap.
    """
    for minutes in (scene.duration_minutes, scene.expected_duration_minutes):
        if minutes is not None and minutes > 0:
            return minutes
    return get_settings(settings).default_duration_minutes


def window_of(scene: Scene, settings: Settings | None = None) -> TimeWindow | None:
    """Return the half-open window *scene* occupies, or ``None`` if unscheduled."""
    if scene.scheduled_time is None:
        return None
    start = scene.scheduled_time
    end = start + timedelta(minutes=effective_duration_minutes(scene, settings))
    return TimeWindow(start=start, end=end)


def overlaps(first: TimeWindow, second: TimeWindow) -> bool:
    """Overlap rule: first.start < second.end AND second.start < first.end.

    Exact boundary touches (end == start) are NOT overlaps.
    """
    return first.start < second.end and second.start < first.end


def intersection(first: TimeWindow, second: TimeWindow) -> TimeWindow:
    if not overlaps(first, second):
        raise ValueError("windows do not overlap")
    return TimeWindow(
        start=max(first.start, second.start),
        end=min(first.end, second.end),
    )
