"""One-time snapshot fetch that seeds the location store."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from locshare._api.locations import fetch_all_locations, fetch_location
from locshare._constants import MSG_SNAPSHOT_UNREACHABLE
from locshare._transport import Transport
from locshare.config import LocshareConfig
from locshare.exceptions import FetchError, FetchUnreachableError, LocationNotFoundError, LocshareError
from locshare.models.location import LocationRecord
from locshare.state.events import ChangeSource
from locshare.state.store import LocationStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotResult:
    """Outcome of :meth:`SnapshotLoader.load_snapshot`.

    ``records`` is what the store was seeded with. When ``error`` is set,
    ``message`` is the text to show the user; ``fallback`` tells whether
    ``records`` is the synthetic placeholder.
    """

    records: tuple[LocationRecord, ...]
    error: FetchError | None = None
    message: str | None = None
    fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class SnapshotLoader:
    """Fetch all locations, or the single deep-linked one, exactly once."""

    def __init__(
        self,
        config: LocshareConfig,
        transport: Transport,
        store: LocationStore,
    ) -> None:
        self._config = config
        self._transport = transport
        self._store = store
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load_snapshot(self, location_id: str | None) -> SnapshotResult:
        """Fetch the snapshot and replace the store's collection with it.

        Never raises for backend or network problems:

        - not found: empty collection, backend message surfaced
        - unreachable: exactly one placeholder record, unreachable message
        """
        if self._loaded:
            raise LocshareError("Snapshot already loaded for this session")
        self._loaded = True

        try:
            if location_id is not None:
                record = await fetch_location(self._transport, location_id)
                result = SnapshotResult(records=(record,))
                _logger.debug("Fetched single location id=%s", record.id)
            else:
                records = await fetch_all_locations(self._transport)
                result = SnapshotResult(records=tuple(records))
                _logger.debug("Fetched all locations: %d records", len(records))
        except LocationNotFoundError as exc:
            _logger.debug("Location %s not found: %s", location_id, exc)
            result = SnapshotResult(records=(), error=exc, message=str(exc))
        except FetchUnreachableError as exc:
            _logger.warning("Snapshot fetch failed: %s", exc)
            result = SnapshotResult(
                records=(LocationRecord.fallback(),),
                error=exc,
                message=MSG_SNAPSHOT_UNREACHABLE.format(base_url=self._config.base_url),
                fallback=True,
            )

        source = ChangeSource.FALLBACK if result.fallback else ChangeSource.SNAPSHOT
        self._store.replace_all(result.records, source=source)
        return result
