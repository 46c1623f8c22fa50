"""Sharing the local device's position."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from locshare._api.locations import create_location
from locshare._constants import MSG_CAPTURE_FAILED, MSG_NAME_REQUIRED, MSG_NO_GEOLOCATION
from locshare._transport import Transport
from locshare.deep_link import build_share_url
from locshare.exceptions import (
    CapabilityUnavailableError,
    CaptureFailedError,
    InvalidInputError,
    PositionCaptureError,
)
from locshare.models.location import Coordinates, LocationRecord
from locshare.state.events import ChangeSource
from locshare.state.store import LocationStore

_logger = logging.getLogger(__name__)


class PositionProvider(Protocol):
    """Device position capability: one reading per call.

    Implementations raise :class:`PositionCaptureError` when a reading
    cannot be taken. A bare ``TimeoutError`` counts as a ``"timeout"``
    capture failure and any other exception as ``"position_unavailable"``.
    """

    async def get_current_position(self) -> Coordinates:
        ...


class StaticPositionProvider:
    """Position provider that always reports the same coordinates."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self._position = Coordinates(latitude=latitude, longitude=longitude)

    async def get_current_position(self) -> Coordinates:
        return self._position


@dataclass(frozen=True)
class ShareLink:
    """Result of a successful share."""

    url: str
    location_id: str
    record: LocationRecord


class ShareCoordinator:
    """Capture the device position, submit it, and build a share link.

    Parameters
    ----------
    transport : Transport
        Backend transport.
    store : LocationStore
        Store that receives the created record.
    origin : str
        Page origin used as the share link's base address.
    position_provider : PositionProvider or None
        Device capability; ``None`` when the platform has none.
    single_location : bool
        Whether the session is a read-only deep-link view. The created
        record is then not added to the store.
    """

    def __init__(
        self,
        *,
        transport: Transport,
        store: LocationStore,
        origin: str,
        position_provider: PositionProvider | None,
        single_location: bool = False,
    ) -> None:
        self._transport = transport
        self._store = store
        self._origin = origin
        self._position_provider = position_provider
        self._single_location = single_location

    async def share_current_position(self, participant_name: str) -> ShareLink:
        """Share the current position under *participant_name*.

        Raises
        ------
        InvalidInputError
            Blank participant name.
        CapabilityUnavailableError
            No position provider.
        CaptureFailedError
            The provider could not take a reading.
        ShareRejectedError
            The backend rejected the submission.
        ShareUnreachableError
            The backend could not be reached.
        """
        name = (participant_name or "").strip()
        if not name:
            raise InvalidInputError(MSG_NAME_REQUIRED)
        provider = self._position_provider
        if provider is None:
            raise CapabilityUnavailableError(MSG_NO_GEOLOCATION)

        try:
            position = await provider.get_current_position()
        except PositionCaptureError as exc:
            _logger.debug("Position capture failed reason=%s", exc.reason, exc_info=True)
            raise CaptureFailedError(MSG_CAPTURE_FAILED.format(reason=exc), reason=exc.reason) from exc
        except TimeoutError as exc:
            _logger.debug("Position capture timed out", exc_info=True)
            raise CaptureFailedError(MSG_CAPTURE_FAILED.format(reason=str(exc) or "timeout"), reason="timeout") from exc
        except Exception as exc:
            _logger.warning("Position provider %r failed", provider, exc_info=True)
            raise CaptureFailedError(
                MSG_CAPTURE_FAILED.format(reason=str(exc) or "position unavailable"),
                reason="position_unavailable",
            ) from exc

        _logger.debug("Sharing location name=%s lat=%s lng=%s", name, position.latitude, position.longitude)
        record = await create_location(self._transport, name, position)
        location_id = str(record.id)

        url = build_share_url(self._origin, location_id)
        _logger.debug("Location shared, url=%s", url)
        if not self._single_location:
            self._store.upsert(record, source=ChangeSource.LOCAL)
        return ShareLink(url=url, location_id=location_id, record=record)
