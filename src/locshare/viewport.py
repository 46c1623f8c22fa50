"""Map viewport derived from the store's most recent record."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from locshare._constants import DEFAULT_CENTER, DEFAULT_ZOOM
from locshare.models.location import LocationRecord
from locshare.state.events import StoreChange
from locshare.state.store import LocationStore

_logger = logging.getLogger(__name__)

ViewportListener = Callable[["Viewport"], None]


@dataclass(frozen=True)
class Viewport:
    center: tuple[float, float]
    zoom: int = DEFAULT_ZOOM


def compute_viewport(record: LocationRecord | None) -> Viewport:
    """Center on *record*, or on the default center when there is none."""
    if record is None:
        return Viewport(center=DEFAULT_CENTER)
    return Viewport(center=(record.latitude, record.longitude))


class ViewportController:
    """Keeps a :class:`Viewport` in step with a :class:`LocationStore`."""

    def __init__(self, store: LocationStore) -> None:
        self._store = store
        self._viewport = compute_viewport(store.most_recent())
        self._listeners: list[ViewportListener] = []
        self._unsubscribe: Callable[[], None] | None = store.subscribe(self._on_change)

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def subscribe(self, listener: ViewportListener) -> Callable[[], None]:
        """Register *listener* for every recomputed viewport."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()

    def _on_change(self, _change: StoreChange) -> None:
        self._viewport = compute_viewport(self._store.most_recent())
        for listener in list(self._listeners):
            try:
                listener(self._viewport)
            except Exception:
                _logger.exception("Viewport listener %r failed", listener)
