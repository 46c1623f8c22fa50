from __future__ import annotations

from locshare.models.location import LocationRecord
from locshare.render import describe, to_markers
from locshare.state.store import LocationStore
from locshare.viewport import Viewport, ViewportController, compute_viewport


def _rec(location_id: str, lat: float, lng: float) -> LocationRecord:
    return LocationRecord(id=location_id, participant_name=f"user-{location_id}", latitude=lat, longitude=lng)


def test_default_viewport_when_empty() -> None:
    assert compute_viewport(None) == Viewport(center=(51.505, -0.09), zoom=13)


def test_controller_follows_most_recent_record() -> None:
    store = LocationStore()
    controller = ViewportController(store)
    seen: list[Viewport] = []
    controller.subscribe(seen.append)

    store.replace_all([_rec("a", 1, 2)])
    store.upsert(_rec("b", 3, 4))
    store.upsert(_rec("a", 9, 9))

    assert controller.viewport.center == (3, 4)
    assert [v.center for v in seen] == [(1, 2), (3, 4), (3, 4)]


def test_controller_starts_from_existing_content_and_stops_after_close() -> None:
    store = LocationStore()
    store.upsert(_rec("a", 5, 6))
    controller = ViewportController(store)
    assert controller.viewport.center == (5, 6)

    controller.close()
    store.upsert(_rec("b", 7, 8))
    assert controller.viewport.center == (5, 6)


def test_markers_and_list_lines() -> None:
    record = LocationRecord.model_validate(
        {"_id": "a", "username": "alice", "latitude": 1.5, "longitude": 2.5, "timestamp": "2025-05-01T10:00:00Z"}
    )

    (marker,) = to_markers([record])

    assert (marker.key, marker.title, marker.latitude, marker.longitude) == ("a", "alice", 1.5, 2.5)
    assert marker.label == "Lat: 1.5, Lng: 2.5"
    assert describe(record) == "alice: Lat 1.5, Lng 2.5 (Shared at 2025-05-01 10:00:00)"
