"""High-level async session for the location-sharing backend."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

import aiohttp

from locshare._transport import HttpTransport, Transport
from locshare.config import LocshareConfig
from locshare.deep_link import page_origin, resolve_location_id
from locshare.exceptions import LocshareError, ShareError, StreamConnectError
from locshare.models.location import LocationRecord
from locshare.render import MapMarker, to_markers
from locshare.share import PositionProvider, ShareCoordinator, ShareLink
from locshare.snapshot import SnapshotLoader, SnapshotResult
from locshare.state.events import ChangeSource
from locshare.state.store import LocationStore
from locshare.stream import ConnectionManager, ConnectionState, StreamClient, default_stream_client
from locshare.viewport import Viewport, ViewportController

_logger = logging.getLogger(__name__)


class SessionMode(StrEnum):
    ALL = "all"
    SINGLE = "single"


class LocationShareClient:
    """One page session: snapshot, live stream, sharing and viewport.

    The page address in ``config.page_url`` decides the mode: with a
    ``locationId`` parameter the session shows that single record and
    ignores live updates; without it, it shows every shared location and
    follows the stream.

    Usage::

        async with LocationShareClient(config, position_provider=provider) as client:
            await client.start()
            link = await client.share("alice")

    Every backend, stream and capture failure is turned into the
    :attr:`error` message; none of them raise out of :meth:`start` or
    :meth:`share`.
    """

    def __init__(
        self,
        config: LocshareConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        position_provider: PositionProvider | None = None,
        stream_client_factory: Callable[[], StreamClient] = default_stream_client,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._position_provider = position_provider
        self._stream_client_factory = stream_client_factory

        self._location_id = resolve_location_id(config.page_url)
        self._origin = page_origin(config.page_url)
        self._store = LocationStore()
        self._viewport = ViewportController(self._store)

        self._snapshot: SnapshotLoader | None = None
        self._share: ShareCoordinator | None = None
        self._connection: ConnectionManager | None = None
        self._snapshot_task: asyncio.Task[SnapshotResult] | None = None

        self._error: str | None = None
        self._is_loading = True
        self._share_url: str | None = None
        self._entered = False
        self._closed = False

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LocationShareClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)

        single = self.mode == SessionMode.SINGLE
        self._snapshot = SnapshotLoader(self._config, self._transport, self._store)
        self._share = ShareCoordinator(
            transport=self._transport,
            store=self._store,
            origin=self._origin,
            position_provider=self._position_provider,
            single_location=single,
        )
        self._connection = ConnectionManager(
            self._config,
            forward_events=not single,
            client_factory=self._stream_client_factory,
        )
        self._connection.subscribe_locations(self._on_stream_location)
        self._connection.subscribe_errors(self._on_stream_error)
        self._entered = True
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Tear the session down; results arriving afterwards are discarded."""
        if self._closed:
            return
        self._closed = True

        task = self._snapshot_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if self._connection is not None:
            await self._connection.close()
        self._store.close()
        self._viewport.close()

        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None
        _logger.debug("Location session closed")

    # ------------------------------------------------------------------
    # Page flow
    # ------------------------------------------------------------------

    async def start(self) -> SnapshotResult | None:
        """Open the live stream and load the snapshot.

        The stream is opened first and runs independently of the snapshot
        outcome. The snapshot is loaded once per session; later calls return
        the first call's result. Returns ``None`` when the session was closed
        before the snapshot resolved.
        """
        loader = self._require(self._snapshot)
        connection = self._require(self._connection)

        if self._snapshot_task is None:
            if self._config.stream_enabled:
                connection.open()
            _logger.debug("Fetching locations mode=%s location_id=%s", self.mode, self._location_id)
            self._snapshot_task = asyncio.create_task(loader.load_snapshot(self._location_id))

        try:
            result = await asyncio.shield(self._snapshot_task)
        except asyncio.CancelledError:
            if self._closed:
                return None
            raise

        if self._closed:
            return None
        if self._is_loading:
            self._is_loading = False
            if result.message:
                self._error = result.message
        return result

    async def share(self, participant_name: str) -> ShareLink | None:
        """Share the device position; returns the link or ``None`` on failure."""
        coordinator = self._require(self._share)
        try:
            link = await coordinator.share_current_position(participant_name)
        except ShareError as exc:
            _logger.debug("Share failed: %s", exc)
            if not self._closed:
                self._error = str(exc)
            return None

        if self._closed:
            return None
        self._share_url = link.url
        self._error = None
        return link

    # ------------------------------------------------------------------
    # Page state
    # ------------------------------------------------------------------

    @property
    def mode(self) -> SessionMode:
        return SessionMode.SINGLE if self._location_id is not None else SessionMode.ALL

    @property
    def location_id(self) -> str | None:
        return self._location_id

    @property
    def origin(self) -> str:
        return self._origin

    @property
    def store(self) -> LocationStore:
        return self._store

    @property
    def locations(self) -> tuple[LocationRecord, ...]:
        return self._store.records

    @property
    def markers(self) -> list[MapMarker]:
        return to_markers(self._store.records)

    @property
    def viewport(self) -> Viewport:
        return self._viewport.viewport

    @property
    def viewport_controller(self) -> ViewportController:
        return self._viewport

    @property
    def connection(self) -> ConnectionManager | None:
        return self._connection

    @property
    def connection_state(self) -> ConnectionState:
        if self._connection is None:
            return ConnectionState.DISCONNECTED
        return self._connection.state

    @property
    def error(self) -> str | None:
        """The single user-visible error message, if any."""
        return self._error

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def share_url(self) -> str | None:
        return self._share_url

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, component: Any) -> Any:
        if not self._entered:
            raise LocshareError("Client not initialized. Use 'async with LocationShareClient(...) as client:'")
        if self._closed:
            raise LocshareError("Client is closed")
        return component

    def _on_stream_location(self, record: LocationRecord) -> None:
        self._store.upsert(record, source=ChangeSource.STREAM)

    def _on_stream_error(self, _error: StreamConnectError, message: str) -> None:
        if not self._closed:
            self._error = message
