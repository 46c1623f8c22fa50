from __future__ import annotations

from typing import Any

import pytest
from fakes import FakeLocationBackend, location_doc

from locshare.config import LocshareConfig
from locshare.exceptions import FetchUnreachableError, LocationNotFoundError, LocshareError
from locshare.snapshot import SnapshotLoader
from locshare.state.events import ChangeSource, StoreChange
from locshare.state.store import LocationStore


def _loader(backend: Any, store: LocationStore) -> SnapshotLoader:
    return SnapshotLoader(LocshareConfig(), backend, store)


@pytest.mark.asyncio
async def test_fetch_all_replaces_store() -> None:
    backend = FakeLocationBackend(documents=[location_doc("a"), location_doc("b", "bob")])
    store = LocationStore()
    changes: list[StoreChange] = []
    store.subscribe(changes.append)

    result = await _loader(backend, store).load_snapshot(None)

    assert result.ok
    assert [r.id for r in store.records] == ["a", "b"]
    assert backend.calls == [("GET", "/api/locations")]
    assert [c.source for c in changes] == [ChangeSource.SNAPSHOT]


@pytest.mark.asyncio
async def test_fetch_single_location() -> None:
    backend = FakeLocationBackend(documents=[location_doc("a"), location_doc("b", "bob")])
    store = LocationStore()

    result = await _loader(backend, store).load_snapshot("b")

    assert result.ok
    assert [r.participant_name for r in store.records] == ["bob"]
    assert backend.calls == [("GET", "/api/locations/b")]


@pytest.mark.asyncio
async def test_not_found_empties_collection_without_placeholder() -> None:
    backend = FakeLocationBackend(documents=[location_doc("a")])
    store = LocationStore()

    result = await _loader(backend, store).load_snapshot("missing")

    assert isinstance(result.error, LocationNotFoundError)
    assert result.message == "Location not found"
    assert not result.fallback
    assert store.records == ()


@pytest.mark.asyncio
async def test_transport_failure_substitutes_single_placeholder() -> None:
    backend = FakeLocationBackend(unreachable=True)
    store = LocationStore()

    result = await _loader(backend, store).load_snapshot(None)

    assert isinstance(result.error, FetchUnreachableError)
    assert result.fallback
    assert result.message == "Failed to fetch locations. Is the backend running at http://localhost:5000?"
    assert len(store) == 1
    placeholder = store.records[0]
    assert placeholder.is_placeholder
    assert (placeholder.latitude, placeholder.longitude) == (51.505, -0.09)


@pytest.mark.asyncio
async def test_transport_failure_in_single_mode_also_falls_back() -> None:
    store = LocationStore()

    result = await _loader(FakeLocationBackend(unreachable=True), store).load_snapshot("a")

    assert result.fallback
    assert [r.id for r in store.records] == ["fallback"]


class _OddPayloadTransport:
    def __init__(self, body: Any, status: int = 200) -> None:
        self._body = body
        self._status = status

    async def get_json(self, _endpoint: str) -> tuple[int, Any]:
        return self._status, self._body

    async def post_json(self, _endpoint: str, _body: Any) -> tuple[int, Any]:  # pragma: no cover
        raise AssertionError("unexpected POST")


@pytest.mark.asyncio
async def test_non_list_payload_is_treated_as_unreachable() -> None:
    store = LocationStore()

    result = await _loader(_OddPayloadTransport({"error": "db down"}, status=500), store).load_snapshot(None)

    assert isinstance(result.error, FetchUnreachableError)
    assert "db down" in str(result.error)
    assert result.fallback


@pytest.mark.asyncio
async def test_malformed_items_are_skipped() -> None:
    body = [location_doc("a"), {"_id": "broken"}, location_doc("c")]
    store = LocationStore()

    result = await _loader(_OddPayloadTransport(body), store).load_snapshot(None)

    assert result.ok
    assert [r.id for r in store.records] == ["a", "c"]


@pytest.mark.asyncio
async def test_snapshot_loads_only_once() -> None:
    loader = _loader(FakeLocationBackend(), LocationStore())
    await loader.load_snapshot(None)

    with pytest.raises(LocshareError):
        await loader.load_snapshot(None)
