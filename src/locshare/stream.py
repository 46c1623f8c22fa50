"""Live push-stream connection lifecycle.

Owns:
- connecting to the backend's Socket.IO stream with bounded reconnection
- surfacing connection errors without raising
- queueing inbound ``newLocation`` events and forwarding them in order
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Protocol

import socketio
from pydantic import ValidationError

from locshare._constants import MSG_STREAM_UNREACHABLE, NEW_LOCATION_EVENT
from locshare.config import LocshareConfig
from locshare.exceptions import StreamConnectError
from locshare.models.location import LocationRecord

_logger = logging.getLogger(__name__)

LocationListener = Callable[[LocationRecord], None]
ErrorListener = Callable[[StreamConnectError, str], None]
StateListener = Callable[["ConnectionState"], None]


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class StreamClient(Protocol):
    """Structural interface of the push client (``socketio.AsyncClient``)."""

    def on(self, event: str, handler: Callable[..., Any] | None = None, namespace: str | None = None) -> Any:
        ...

    async def connect(self, url: str, **kwargs: Any) -> None:
        ...

    async def disconnect(self) -> None:
        ...


def default_stream_client() -> StreamClient:
    """Socket.IO client with its own reconnection disabled.

    Reconnection is driven by :class:`ConnectionManager` so the attempt
    budget and teardown stay under its control.
    """
    return socketio.AsyncClient(reconnection=False, logger=False, engineio_logger=False)


class ConnectionManager:
    """Explicitly owned push-stream connection.

    Usage::

        manager = ConnectionManager(config, forward_events=True)
        manager.subscribe_locations(store.upsert)
        manager.open()
        ...
        await manager.close()
    """

    def __init__(
        self,
        config: LocshareConfig,
        *,
        forward_events: bool = True,
        client_factory: Callable[[], StreamClient] = default_stream_client,
    ) -> None:
        self._config = config
        self._forward_events = forward_events
        self._client_factory = client_factory
        self._client: StreamClient | None = None
        self._state = ConnectionState.DISCONNECTED
        self._closing = False

        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=config.stream_queue_size)
        self._disconnected = asyncio.Event()
        self._run_task: asyncio.Task[None] | None = None
        self._drain_task: asyncio.Task[None] | None = None

        self._location_listeners: list[LocationListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._state_listeners: list[StateListener] = []
        self._state_waiters: list[tuple[frozenset[ConnectionState], asyncio.Event]] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def forward_events(self) -> bool:
        return self._forward_events

    @property
    def is_running(self) -> bool:
        """Whether the connect/reconnect loop is active."""
        return self._run_task is not None and not self._run_task.done()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def subscribe_locations(self, listener: LocationListener) -> Callable[[], None]:
        """Receive every forwarded record, in arrival order."""
        self._location_listeners.append(listener)
        return lambda: _discard(self._location_listeners, listener)

    def subscribe_errors(self, listener: ErrorListener) -> Callable[[], None]:
        """Receive ``(error, user_message)`` for every connection failure."""
        self._error_listeners.append(listener)
        return lambda: _discard(self._error_listeners, listener)

    def subscribe_state(self, listener: StateListener) -> Callable[[], None]:
        self._state_listeners.append(listener)
        return lambda: _discard(self._state_listeners, listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Start connecting in the background. Must run inside an event loop."""
        if self._closing:
            raise RuntimeError("ConnectionManager is closed")
        if self.is_running:
            return
        self._drain_task = asyncio.create_task(self._drain(), name="locshare-stream-drain")
        self._run_task = asyncio.create_task(self._run(), name="locshare-stream-connect")

    async def close(self) -> None:
        """Tear the connection down and cancel pending retries."""
        self._closing = True
        self._disconnected.set()

        for task in (self._run_task, self._drain_task):
            if task is not None and not task.done():
                task.cancel()
        for task in (self._run_task, self._drain_task):
            if task is not None:
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._run_task = None
        self._drain_task = None

        client = self._client
        self._client = None
        if client is not None:
            try:
                await client.disconnect()
            except Exception:
                _logger.debug("Stream disconnect failed", exc_info=True)

        if self._state != ConnectionState.FAILED:
            self._set_state(ConnectionState.DISCONNECTED)
        self._location_listeners.clear()
        self._error_listeners.clear()
        self._state_listeners.clear()
        _logger.debug("Stream connection closed")

    async def wait_for_state(self, *states: ConnectionState, timeout: float | None = None) -> bool:
        """Wait until the connection reaches one of *states*."""
        if self._state in states:
            return True
        waiter = asyncio.Event()
        entry = (frozenset(states), waiter)
        self._state_waiters.append(entry)
        try:
            await asyncio.wait_for(waiter.wait(), timeout)
            return True
        except TimeoutError:
            return False
        finally:
            _discard(self._state_waiters, entry)

    async def flush(self) -> None:
        """Wait until every queued event has been forwarded."""
        await self._queue.join()

    # ------------------------------------------------------------------
    # Connect loop
    # ------------------------------------------------------------------

    async def _run(self) -> None:
        reconnects = 0
        while not self._closing:
            if reconnects:
                self._set_state(ConnectionState.DISCONNECTED)
                if self._config.reconnection_delay > 0:
                    await asyncio.sleep(self._config.reconnection_delay)

            self._set_state(ConnectionState.CONNECTING)
            try:
                await self._connect_once()
            except Exception as exc:
                self._client = None
                self._report_error(
                    StreamConnectError(f"Stream connection to {self._config.base_url} failed: {exc}", attempt=reconnects)
                )
                if reconnects >= self._config.reconnection_attempts:
                    _logger.warning(
                        "Stream connection failed after %d reconnection attempts",
                        reconnects,
                    )
                    self._set_state(ConnectionState.FAILED)
                    return
                reconnects += 1
                continue

            self._set_state(ConnectionState.CONNECTED)
            reconnects = 0
            await self._disconnected.wait()
            if self._closing:
                return
            _logger.debug("Stream connection dropped; reconnecting")
            self._client = None
            reconnects = 1

    async def _connect_once(self) -> None:
        client = self._client_factory()
        client.on("disconnect", self._on_disconnect)
        client.on(NEW_LOCATION_EVENT, self._on_new_location)
        self._disconnected.clear()
        self._client = client
        _logger.debug("Stream connecting url=%s", self._config.base_url)
        await client.connect(self._config.base_url)
        _logger.debug("Stream connected")

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        _logger.debug("Stream state %s -> %s", self._state, state)
        self._state = state
        for states, waiter in list(self._state_waiters):
            if state in states and not waiter.is_set():
                waiter.set()
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception:
                _logger.exception("Stream state listener %r failed", listener)

    def _report_error(self, error: StreamConnectError) -> None:
        _logger.warning("%s", error)
        message = MSG_STREAM_UNREACHABLE.format(base_url=self._config.base_url)
        for listener in list(self._error_listeners):
            try:
                listener(error, message)
            except Exception:
                _logger.exception("Stream error listener %r failed", listener)

    # ------------------------------------------------------------------
    # Socket.IO handlers
    # ------------------------------------------------------------------

    def _on_disconnect(self, *_args: Any) -> None:
        self._disconnected.set()

    def _on_new_location(self, payload: Any) -> None:
        if not self._forward_events:
            _logger.debug("Discarding stream event in single-location mode")
            return
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            _logger.warning("Stream queue full (%d); dropping event", self._queue.maxsize)

    async def _drain(self) -> None:
        while True:
            payload = await self._queue.get()
            try:
                record = LocationRecord.model_validate(payload)
            except ValidationError:
                _logger.debug("Dropping malformed stream payload %r", payload, exc_info=True)
                self._queue.task_done()
                continue
            _logger.debug("New location received id=%s", record.id)
            for listener in list(self._location_listeners):
                try:
                    listener(record)
                except Exception:
                    _logger.exception("Stream location listener %r failed", listener)
            self._queue.task_done()


def _discard(items: list[Any], item: Any) -> None:
    if item in items:
        items.remove(item)
