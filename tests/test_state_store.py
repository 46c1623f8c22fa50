from __future__ import annotations

from locshare.models.location import LocationRecord
from locshare.state.events import ChangeKind, ChangeSource, StoreChange
from locshare.state.store import LocationStore


def _rec(location_id: str | None, lat: float = 1.0, lng: float = 2.0, name: str = "alice") -> LocationRecord:
    return LocationRecord(id=location_id, participant_name=name, latitude=lat, longitude=lng)


def _ids(store: LocationStore) -> list[str | None]:
    return [record.id for record in store.records]


def test_upsert_keeps_one_record_per_id_and_first_position() -> None:
    store = LocationStore()
    for location_id in ["a", "b", "a", "c", "b", "a"]:
        store.upsert(_rec(location_id, lat=float(len(store))))

    assert _ids(store) == ["a", "b", "c"]


def test_upsert_replaces_values_in_place() -> None:
    store = LocationStore()
    store.replace_all([_rec("a", 1, 2), _rec("b", 3, 4)])

    change = store.upsert(_rec("a", 9, 9))

    assert change is not None
    assert change.kind == ChangeKind.UPDATE
    assert change.position == 0
    assert _ids(store) == ["a", "b"]
    assert store.get("a") is not None
    assert (store.get("a").latitude, store.get("a").longitude) == (9, 9)  # type: ignore[union-attr]


def test_replace_all_then_upserts_never_reintroduce_removed_records() -> None:
    store = LocationStore()
    store.replace_all([_rec("old-1"), _rec("old-2")])
    store.replace_all([_rec("a")])

    store.upsert(_rec("b"))
    store.upsert(_rec("a", 5, 5))

    assert _ids(store) == ["a", "b"]
    assert store.get("old-1") is None


def test_replace_all_collapses_duplicate_ids() -> None:
    store = LocationStore()
    store.replace_all([_rec("a", 1, 1), _rec("b"), _rec("a", 7, 7)])

    assert _ids(store) == ["a", "b"]
    assert store.get("a").latitude == 7  # type: ignore[union-attr]


def test_records_without_id_are_appended() -> None:
    store = LocationStore()
    store.upsert(_rec(None))
    store.upsert(_rec(None))

    assert _ids(store) == [None, None]


def test_most_recent_is_last_inserted_not_newest_timestamp() -> None:
    store = LocationStore()
    assert store.most_recent() is None

    newer = LocationRecord.model_validate(
        {"_id": "a", "username": "alice", "latitude": 1, "longitude": 1, "timestamp": "2030-01-01T00:00:00Z"}
    )
    older = LocationRecord.model_validate(
        {"_id": "b", "username": "bob", "latitude": 2, "longitude": 2, "timestamp": "2000-01-01T00:00:00Z"}
    )
    store.upsert(newer)
    store.upsert(older)

    assert store.most_recent() == older


def test_update_of_first_record_does_not_change_most_recent() -> None:
    store = LocationStore()
    store.replace_all([_rec("a"), _rec("b")])
    store.upsert(_rec("a", 5, 5))

    assert store.most_recent() is not None
    assert store.most_recent().id == "b"  # type: ignore[union-attr]


def test_subscribers_see_every_committed_change() -> None:
    store = LocationStore()
    seen: list[StoreChange] = []
    unsubscribe = store.subscribe(seen.append)

    store.replace_all([_rec("a")])
    store.upsert(_rec("b"), source=ChangeSource.LOCAL)
    unsubscribe()
    store.upsert(_rec("c"))

    assert [(c.kind, c.source, c.size) for c in seen] == [
        (ChangeKind.REPLACE, ChangeSource.SNAPSHOT, 1),
        (ChangeKind.INSERT, ChangeSource.LOCAL, 2),
    ]


def test_failing_subscriber_does_not_block_others() -> None:
    store = LocationStore()
    seen: list[StoreChange] = []

    def _boom(_change: StoreChange) -> None:
        raise RuntimeError("listener bug")

    store.subscribe(_boom)
    store.subscribe(seen.append)
    store.upsert(_rec("a"))

    assert len(seen) == 1
    assert _ids(store) == ["a"]


def test_closed_store_discards_writes() -> None:
    store = LocationStore()
    store.upsert(_rec("a"))
    store.close()

    assert store.upsert(_rec("b")) is None
    assert store.replace_all([]) is None
    assert _ids(store) == ["a"]
