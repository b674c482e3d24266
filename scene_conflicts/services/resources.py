"""Extraction of the people and places a scene claims."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from scene_conflicts.config import Settings, get_settings
from scene_conflicts.domain.models import Scene

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_DECIMAL_ID = re.compile(r"[0-9]+")


def _as_user_id(value: Any) -> int | None:
    # bool is an int subclass; true/false in a payload is not a user id
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _DECIMAL_ID.fullmatch(value.strip()):
        return int(value.strip())
    return None


def decode_user_ids(payload: Any) -> set[int]:
    """Decode an assignment payload into a set of user ids.

    Accepts a JSON-encoded list (str or bytes) or an already decoded list.
    Anything else, including invalid JSON, degrades to an empty set.
    Members that are not user ids are skipped.
    """
    if payload is None:
        return set()

    decoded = payload
    if isinstance(payload, (str, bytes, bytearray)):
        if not payload.strip():
            return set()
        try:
            decoded = json.loads(payload)
        except (ValueError, RecursionError):
            logger.debug("Ignoring undecodable assignment payload %r", payload)
            return set()

    if not isinstance(decoded, (list, tuple, set, frozenset)):
        logger.debug("Ignoring non-list assignment payload %r", payload)
        return set()

    ids: set[int] = set()
    for member in decoded:
        user_id = _as_user_id(member)
        if user_id is None:
            logger.debug("Skipping assignment member %r", member)
            continue
        ids.add(user_id)
    return ids


def actors_of(scene: Scene) -> set[int]:
    return decode_user_ids(scene.assigned_actors)


def crew_of(scene: Scene) -> set[int]:
    return decode_user_ids(scene.assigned_crew)


def location_key_of(scene: Scene, settings: Settings | None = None) -> str | None:
    """Return the comparison key for a scene's location, ``None`` if blank."""
    if not scene.location:
        return None
    key = scene.location.strip().casefold()
    if get_settings(settings).collapse_location_whitespace:
        key = _WHITESPACE.sub(" ", key)
    return key or None
