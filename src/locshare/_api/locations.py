"""Location endpoints.

Endpoints:
  - GET  /api/locations       (all records)
  - GET  /api/locations/{id}  (single record, ``{error}`` when unknown)
  - POST /api/locations       (create, ``{error}`` on validation failure)

It is internal to locshare and may change at any time.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from locshare._constants import LOCATIONS_ENDPOINT, MSG_SHARE_UNREACHABLE
from locshare._transport import Transport
from locshare.exceptions import (
    FetchUnreachableError,
    LocationNotFoundError,
    LocshareTransportError,
    ShareRejectedError,
    ShareUnreachableError,
)
from locshare.models.location import Coordinates, LocationRecord

_logger = logging.getLogger(__name__)


def _error_text(body: Any) -> str | None:
    """Return the backend's ``error`` string if *body* is an error document."""
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if error is None or error == "":
        return None
    return str(error)


def _parse_records(endpoint: str, items: list[Any]) -> list[LocationRecord]:
    records: list[LocationRecord] = []
    for index, item in enumerate(items):
        try:
            records.append(LocationRecord.model_validate(item))
        except ValidationError:
            _logger.debug("Dropping malformed record #%d from %s", index, endpoint, exc_info=True)
    return records


async def fetch_all_locations(transport: Transport) -> list[LocationRecord]:
    """Fetch every shared location.

    Raises
    ------
    FetchUnreachableError
        Transport failure or a payload that is not a list of records.
    """
    endpoint = LOCATIONS_ENDPOINT
    try:
        status, body = await transport.get_json(endpoint)
    except LocshareTransportError as exc:
        raise FetchUnreachableError(str(exc), endpoint=endpoint) from exc

    if not isinstance(body, list):
        detail = _error_text(body) or f"unexpected payload type {type(body).__name__}"
        raise FetchUnreachableError(f"{endpoint} failed (HTTP {status}): {detail}", endpoint=endpoint)
    return _parse_records(endpoint, body)


async def fetch_location(transport: Transport, location_id: str) -> LocationRecord:
    """Fetch a single location by identifier.

    Raises
    ------
    LocationNotFoundError
        The backend answered with an ``{error}`` document.
    FetchUnreachableError
        Transport failure or an unusable payload.
    """
    endpoint = f"{LOCATIONS_ENDPOINT}/{quote(location_id, safe='')}"
    try:
        status, body = await transport.get_json(endpoint)
    except LocshareTransportError as exc:
        raise FetchUnreachableError(str(exc), endpoint=endpoint) from exc

    error = _error_text(body)
    if error is not None:
        raise LocationNotFoundError(error, endpoint=endpoint)
    if not isinstance(body, dict):
        raise FetchUnreachableError(
            f"{endpoint} failed (HTTP {status}): unexpected payload type {type(body).__name__}",
            endpoint=endpoint,
        )
    try:
        return LocationRecord.model_validate(body)
    except ValidationError as exc:
        raise FetchUnreachableError(f"{endpoint} returned a malformed record", endpoint=endpoint) from exc


async def create_location(
    transport: Transport,
    participant_name: str,
    position: Coordinates,
) -> LocationRecord:
    """Submit a position and return the record the backend created.

    Raises
    ------
    ShareRejectedError
        The backend answered with an ``{error}`` document.
    ShareUnreachableError
        Transport failure or an unusable payload. The message is the fixed
        user-facing text; the detail is logged.
    """
    endpoint = LOCATIONS_ENDPOINT
    payload = {
        "username": participant_name,
        "latitude": position.latitude,
        "longitude": position.longitude,
    }
    try:
        status, body = await transport.post_json(endpoint, payload)
    except LocshareTransportError as exc:
        _logger.warning("Share submission failed: %s", exc)
        raise ShareUnreachableError(MSG_SHARE_UNREACHABLE) from exc

    error = _error_text(body)
    if error is not None:
        raise ShareRejectedError(error)
    if not isinstance(body, dict):
        _logger.warning("%s failed (HTTP %s): unexpected payload type %s", endpoint, status, type(body).__name__)
        raise ShareUnreachableError(MSG_SHARE_UNREACHABLE)
    try:
        record = LocationRecord.model_validate(body)
    except ValidationError as exc:
        _logger.warning("%s returned a malformed record (HTTP %s)", endpoint, status, exc_info=True)
        raise ShareUnreachableError(MSG_SHARE_UNREACHABLE) from exc
    if record.id is None:
        _logger.warning("%s returned a record without an identifier (HTTP %s)", endpoint, status)
        raise ShareUnreachableError(MSG_SHARE_UNREACHABLE)
    return record
