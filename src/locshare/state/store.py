"""Deterministic in-memory location store.

This is the only component allowed to mutate location data. Given the same
sequence of ``replace_all``/``upsert`` calls it produces the same ordered
collection.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from locshare.models.location import LocationRecord
from locshare.state.events import ChangeKind, ChangeSource, StoreChange

_logger = logging.getLogger(__name__)

StoreListener = Callable[[StoreChange], None]


class LocationStore:
    """Ordered collection of location records, unique by ``id``.

    Insertion order is display order. A record whose ``id`` is already
    present replaces the existing entry in place; records without an
    ``id`` cannot be matched and are always appended.
    """

    def __init__(self) -> None:
        self._records: list[LocationRecord] = []
        self._positions: dict[str, int] = {}
        self._listeners: list[StoreListener] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def records(self) -> tuple[LocationRecord, ...]:
        """Current collection in display order."""
        return tuple(self._records)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LocationRecord]:
        return iter(tuple(self._records))

    def get(self, location_id: str) -> LocationRecord | None:
        position = self._positions.get(location_id)
        return self._records[position] if position is not None else None

    def most_recent(self) -> LocationRecord | None:
        """Last record in insertion order (not the newest timestamp)."""
        return self._records[-1] if self._records else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def replace_all(
        self,
        records: Iterable[LocationRecord],
        *,
        source: ChangeSource = ChangeSource.SNAPSHOT,
    ) -> StoreChange | None:
        """Replace the whole collection.

        Duplicate identifiers inside *records* collapse onto the first
        occurrence's position, carrying the last occurrence's values.
        """
        if self._closed:
            _logger.debug("Store closed; discarding %s replacement", source)
            return None

        new_records: list[LocationRecord] = []
        new_positions: dict[str, int] = {}
        for record in records:
            position = new_positions.get(record.id) if record.id is not None else None
            if position is not None:
                new_records[position] = record
                continue
            if record.id is not None:
                new_positions[record.id] = len(new_records)
            new_records.append(record)

        self._records = new_records
        self._positions = new_positions
        _logger.debug("Store replaced from %s: %d records", source, len(new_records))
        return self._commit(StoreChange(kind=ChangeKind.REPLACE, source=source, size=len(new_records)))

    def upsert(
        self,
        record: LocationRecord,
        *,
        source: ChangeSource = ChangeSource.STREAM,
    ) -> StoreChange | None:
        """Insert *record*, or replace the entry with the same ``id`` in place."""
        if self._closed:
            _logger.debug("Store closed; discarding %s upsert id=%s", source, record.id)
            return None

        position = self._positions.get(record.id) if record.id is not None else None
        if position is not None:
            self._records[position] = record
            kind = ChangeKind.UPDATE
        else:
            position = len(self._records)
            self._records.append(record)
            if record.id is not None:
                self._positions[record.id] = position
            kind = ChangeKind.INSERT

        _logger.debug("Store %s from %s id=%s position=%d", kind, source, record.id, position)
        return self._commit(
            StoreChange(
                kind=kind,
                source=source,
                record=record,
                position=position,
                size=len(self._records),
            )
        )

    def close(self) -> None:
        """Stop accepting writes; late results are discarded from now on."""
        self._closed = True
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register *listener* for every committed change.

        Returns a callable that removes the registration.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _commit(self, change: StoreChange) -> StoreChange:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.exception("Store listener %r failed", listener)
        return change
