"""Human-readable phrasing for conflict records."""

from __future__ import annotations

from scene_conflicts.domain.models import ConflictRecord, ConflictType, TimeWindow

_SUBJECTS = {
    ConflictType.ACTOR_DOUBLE_BOOKED: "Actor",
    ConflictType.CREW_DOUBLE_BOOKED: "Crew",
    ConflictType.LOCATION_DOUBLE_BOOKED: "Location",
}


def format_window(window: TimeWindow) -> str:
    """Render a window as ``HH:MM-HH:MM``, adding dates when it spans days."""
    if window.start.date() == window.end.date():
        return f"{window.start:%H:%M}-{window.end:%H:%M}"
    return f"{window.start:%Y-%m-%d %H:%M}-{window.end:%Y-%m-%d %H:%M}"


def describe_conflict(record: ConflictRecord) -> str:
    """Phrase *record* the way the calendar shows it, e.g.

    ``Actor 7 is already booked 14:30-15:00 in Scene 11 (Rehearsal)``
    """
    subject = _SUBJECTS[record.conflict_type]
    if record.resource_ids:
        subject = f"{subject} {', '.join(str(i) for i in record.resource_ids)}"
    verb = "are" if len(record.resource_ids) > 1 else "is"

    scene = f"Scene {record.other_scene_number or record.other_scene_id}"
    if record.other_scene_title:
        scene = f"{scene} ({record.other_scene_title})"

    return f"{subject} {verb} already booked {format_window(record.overlap_window)} in {scene}"
