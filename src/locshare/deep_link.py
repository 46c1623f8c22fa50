"""Deep-link addressing: reading and building ``?locationId=<id>`` addresses."""

from __future__ import annotations

from urllib.parse import parse_qs, quote, urlsplit

from locshare._constants import LOCATION_ID_PARAM


def resolve_location_id(page_url: str) -> str | None:
    """Return the location identifier carried by *page_url*, if any.

    A missing or empty ``locationId`` parameter is a normal value and
    yields ``None`` (all-locations mode).
    """
    query = urlsplit(page_url).query
    values = parse_qs(query).get(LOCATION_ID_PARAM)
    if not values:
        return None
    location_id = values[0].strip()
    return location_id or None


def page_origin(page_url: str) -> str:
    """Return ``scheme://host[:port]`` of *page_url*."""
    parts = urlsplit(page_url)
    if not parts.scheme or not parts.netloc:
        return page_url.split("?", 1)[0].rstrip("/")
    return f"{parts.scheme}://{parts.netloc}"


def build_share_url(origin: str, location_id: str) -> str:
    """Build the shareable address ``<origin>?locationId=<id>``."""
    return f"{origin.rstrip('/')}?{LOCATION_ID_PARAM}={quote(location_id, safe='')}"
