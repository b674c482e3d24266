"""End-to-end tests for the scene and conflict endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from scene_conflicts.main import app, scene_repo


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset the in-memory store before each test."""
    scene_repo._store.clear()
    yield
    scene_repo._store.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def _create(client, **fields) -> dict:
    body = {"company_id": 1, "title": "Scene", "scene_number": "1"}
    body.update(fields)
    resp = client.post("/scenes", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Create / update
# ---------------------------------------------------------------------------


def test_create_clean_scene(client):
    """A scene with nothing to clash against saves with no conflict result."""
    data = _create(client, scheduled_time="2025-03-01T14:00:00Z", assigned_actors=[7])
    assert data["conflicts"] is None
    assert data["scene"]["id"] is not None
    assert data["scene"]["assigned_actors"] == "[7]"


def test_create_reports_conflicts_but_still_saves(client):
    """Conflicts are reported on create but never block the save."""
    first = _create(
        client, title="Kitchen", scene_number="10",
        scheduled_time="2025-03-01T14:00:00Z", duration_minutes=60, assigned_actors=[7],
    )
    second = _create(
        client, title="Hallway", scene_number="11",
        scheduled_time="2025-03-01T14:30:00Z", duration_minutes=60, assigned_actors=[7, 8],
    )

    conflicts = second["conflicts"]
    assert conflicts["has_conflicts"] is True
    (record,) = conflicts["conflicts"]
    assert record["conflict_type"] == "actor_double_booked"
    assert record["other_scene_id"] == first["scene"]["id"]
    assert record["resource_ids"] == [7]
    assert record["overlap_window"]["start"].startswith("2025-03-01T14:30:00")
    assert record["overlap_window"]["end"].startswith("2025-03-01T15:00:00")
    assert scene_repo.get(second["scene"]["id"]) is not None


def test_create_requires_title(client):
    """An empty title is rejected before anything is stored."""
    resp = client.post("/scenes", json={"company_id": 1, "title": ""})
    assert resp.status_code == 422


def test_update_scheduling_fields_rechecks(client):
    """Moving a scene rechecks it using the merged record."""
    first = _create(client, scheduled_time="2025-03-01T14:00:00Z", location="Stage 4")
    second = _create(client, scheduled_time="2025-03-01T16:00:00Z", location="Stage 4")

    resp = client.patch(
        f"/scenes/{second['scene']['id']}",
        params={"company_id": 1},
        json={"scheduled_time": "2025-03-01T14:15:00Z"},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["scene"]["location"] == "Stage 4"
    (record,) = data["conflicts"]["conflicts"]
    assert record["conflict_type"] == "location_double_booked"
    assert record["other_scene_id"] == first["scene"]["id"]


def test_update_without_scheduling_fields_skips_check(client):
    """Edits that leave scheduling untouched skip the conflict check."""
    _create(client, scheduled_time="2025-03-01T14:00:00Z", assigned_actors=[7])
    second = _create(client, scheduled_time="2025-03-01T14:00:00Z", assigned_actors=[7])

    resp = client.patch(
        f"/scenes/{second['scene']['id']}",
        params={"company_id": 1},
        json={"title": "Renamed", "notes": "bring umbrellas"},
    )

    assert resp.status_code == 200
    assert resp.json()["scene"]["title"] == "Renamed"
    assert resp.json()["conflicts"] is None


def test_update_unknown_scene(client):
    """Updating a missing scene returns None."""
    resp = client.patch("/scenes/999", params={"company_id": 1}, json={"title": "x"})
    assert resp.status_code == 404


def test_scene_of_another_company_is_forbidden(client):
    """Scenes are only reachable through their own company."""
    created = _create(client, company_id=2)
    scene_id = created["scene"]["id"]

    assert client.get(f"/scenes/{scene_id}", params={"company_id": 1}).status_code == 403
    assert (
        client.patch(f"/scenes/{scene_id}", params={"company_id": 1}, json={}).status_code
        == 403
    )
    assert client.delete(f"/scenes/{scene_id}", params={"company_id": 1}).status_code == 403
    assert client.get(f"/scenes/{scene_id}", params={"company_id": 2}).status_code == 200


def test_delete_scene(client):
    """Deleted scenes are gone from subsequent reads."""
    created = _create(client)
    scene_id = created["scene"]["id"]

    resp = client.delete(f"/scenes/{scene_id}", params={"company_id": 1})

    assert resp.json() == {"status": "deleted"}
    assert client.get(f"/scenes/{scene_id}", params={"company_id": 1}).status_code == 404


# ---------------------------------------------------------------------------
# Interactive check
# ---------------------------------------------------------------------------


def test_check_conflicts_does_not_save(client):
    """The interactive check reports conflicts without persisting anything."""
    _create(client, scheduled_time="2025-03-01T14:00:00Z", assigned_crew=[3])

    resp = client.post(
        "/scenes/check-conflicts",
        json={"company_id": 1, "scheduled_time": "2025-03-01T14:59:00Z", "assigned_crew": [3, 4]},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["has_conflicts"] is True
    assert data["conflicts"][0]["conflict_type"] == "crew_double_booked"
    assert data["conflicts"][0]["scene_id"] is None
    assert len(scene_repo.list_all()) == 1


def test_check_conflicts_excludes_the_edited_scene(client):
    """A scene being edited is not compared with its stored self."""
    created = _create(client, scheduled_time="2025-03-01T14:00:00Z", assigned_actors=[7])

    resp = client.post(
        "/scenes/check-conflicts",
        json={
            "company_id": 1,
            "scene_id": created["scene"]["id"],
            "scheduled_time": "2025-03-01T14:30:00Z",
            "assigned_actors": [7],
        },
    )

    assert resp.json() == {"has_conflicts": False, "conflicts": []}


def test_check_conflicts_without_time(client):
    """Candidates without a scheduled time are always clean."""
    _create(client, scheduled_time="2025-03-01T14:00:00Z", assigned_actors=[7])

    resp = client.post("/scenes/check-conflicts", json={"company_id": 1, "assigned_actors": [7]})

    assert resp.json() == {"has_conflicts": False, "conflicts": []}


# ---------------------------------------------------------------------------
# Calendar view
# ---------------------------------------------------------------------------


def test_calendar_lists_scenes_with_their_conflicts(client):
    """The calendar view lists in-range scenes with conflicts from outside the range."""
    late_feb = _create(
        client, title="Night shoot", scheduled_time="2025-02-28T23:30:00Z",
        duration_minutes=120, assigned_actors=[7],
    )
    march = _create(
        client, title="Dawn", scheduled_time="2025-03-01T00:30:00Z", assigned_actors=[7],
    )
    quiet = _create(client, title="Quiet", scheduled_time="2025-03-02T10:00:00Z")
    _create(client, title="Unscheduled", assigned_actors=[7])
    _create(client, company_id=2, scheduled_time="2025-03-01T00:30:00Z", assigned_actors=[7])

    resp = client.get(
        "/scenes/conflicts",
        params={
            "company_id": 1,
            "start_date": "2025-03-01T00:00:00Z",
            "end_date": "2025-04-01T00:00:00Z",
        },
    )

    assert resp.status_code == 200
    rows = resp.json()
    assert [row["scene"]["id"] for row in rows] == [march["scene"]["id"], quiet["scene"]["id"]]
    assert rows[0]["has_conflicts"] is True
    assert rows[0]["conflicts"][0]["other_scene_id"] == late_feb["scene"]["id"]
    assert rows[1] == {"scene": rows[1]["scene"], "has_conflicts": False, "conflicts": []}


def test_calendar_show_filter(client):
    """The show filter narrows the listed scenes but not the comparison pool."""
    _create(client, show_id=1, scheduled_time="2025-03-01T14:00:00Z", location="Lot")
    other_show = _create(client, show_id=2, scheduled_time="2025-03-01T14:00:00Z", location="Lot")

    resp = client.get("/scenes/conflicts", params={"company_id": 1, "show_ids": [2]})

    rows = resp.json()
    assert [row["scene"]["id"] for row in rows] == [other_show["scene"]["id"]]
    assert rows[0]["conflicts"][0]["other_show_id"] == 1


def test_calendar_empty(client):
    """An empty company yields an empty calendar."""
    assert client.get("/scenes/conflicts", params={"company_id": 1}).json() == []


def test_update_status_is_carried_through(client):
    """Status changes are stored and never trigger a conflict check."""
    created = _create(client, scheduled_time="2025-03-01T14:00:00Z")
    assert created["scene"]["status"] == "planned"

    resp = client.patch(
        f"/scenes/{created['scene']['id']}",
        params={"company_id": 1},
        json={"status": "complete"},
    )

    assert resp.status_code == 200
    assert resp.json()["scene"]["status"] == "complete"
    assert resp.json()["conflicts"] is None
    assert (
        client.patch(
            f"/scenes/{created['scene']['id']}",
            params={"company_id": 1},
            json={"status": "wrapped"},
        ).status_code
        == 422
    )
