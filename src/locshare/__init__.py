"""locshare - Async Python client for a live location-sharing backend."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("locshare")
except PackageNotFoundError:
    __version__ = "0+local"
from locshare.client import LocationShareClient, SessionMode
from locshare.config import LocshareConfig
from locshare.deep_link import build_share_url, page_origin, resolve_location_id
from locshare.exceptions import (
    CapabilityUnavailableError,
    CaptureFailedError,
    FetchError,
    FetchUnreachableError,
    InvalidInputError,
    LocationNotFoundError,
    LocshareConfigError,
    LocshareError,
    LocshareTransportError,
    PositionCaptureError,
    ShareError,
    ShareRejectedError,
    ShareUnreachableError,
    StreamConnectError,
    StreamError,
)
from locshare.models import Coordinates, LocationRecord
from locshare.render import MapMarker
from locshare.share import PositionProvider, ShareCoordinator, ShareLink, StaticPositionProvider
from locshare.snapshot import SnapshotLoader, SnapshotResult
from locshare.state.events import ChangeKind, ChangeSource, StoreChange
from locshare.state.store import LocationStore
from locshare.stream import ConnectionManager, ConnectionState
from locshare.viewport import Viewport, ViewportController, compute_viewport

__all__ = [
    "__version__",
    "CapabilityUnavailableError",
    "CaptureFailedError",
    "ChangeKind",
    "ChangeSource",
    "ConnectionManager",
    "ConnectionState",
    "Coordinates",
    "FetchError",
    "FetchUnreachableError",
    "InvalidInputError",
    "LocationNotFoundError",
    "LocationRecord",
    "LocationShareClient",
    "LocationStore",
    "LocshareConfig",
    "LocshareConfigError",
    "LocshareError",
    "LocshareTransportError",
    "MapMarker",
    "PositionCaptureError",
    "PositionProvider",
    "SessionMode",
    "ShareCoordinator",
    "ShareError",
    "ShareLink",
    "ShareRejectedError",
    "ShareUnreachableError",
    "SnapshotLoader",
    "SnapshotResult",
    "StaticPositionProvider",
    "StoreChange",
    "StreamConnectError",
    "StreamError",
    "Viewport",
    "ViewportController",
    "build_share_url",
    "compute_viewport",
    "page_origin",
    "resolve_location_id",
]
