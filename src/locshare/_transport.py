"""JSON-over-HTTP transport for the locations backend."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from locshare._constants import USER_AGENT
from locshare.config import LocshareConfig
from locshare.exceptions import LocshareTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> tuple[int, Any]:
        ...

    async def post_json(self, endpoint: str, body: Mapping[str, Any]) -> tuple[int, Any]:
        ...


class HttpTransport:
    """HTTP transport that exchanges JSON documents with the backend.

    Non-200 statuses are *not* raised here: the backend reports domain
    errors as ``{"error": ...}`` bodies and the endpoint modules decide
    what they mean. Only network failures, timeouts and bodies that are
    not JSON raise :class:`LocshareTransportError`.
    """

    def __init__(
        self,
        config: LocshareConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = (
            aiohttp.ClientTimeout(total=config.request_timeout) if config.request_timeout is not None else None
        )

    async def get_json(self, endpoint: str) -> tuple[int, Any]:
        return await self._request("GET", endpoint)

    async def post_json(self, endpoint: str, body: Mapping[str, Any]) -> tuple[int, Any]:
        return await self._request("POST", endpoint, body=body)

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        body: Mapping[str, Any] | None = None,
    ) -> tuple[int, Any]:
        url = f"{self._config.base_url}{endpoint}"
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        data: str | None = None
        if body is not None:
            headers["content-type"] = "application/json"
            data = json.dumps(dict(body), separators=(",", ":"))

        _logger.debug("%s %s", method, url)

        kwargs: dict[str, Any] = {"data": data, "headers": headers}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            async with self._http.request(method, url, **kwargs) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise LocshareTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except asyncio.TimeoutError as exc:
            raise LocshareTransportError(
                f"Request to {endpoint} timed out",
                endpoint=endpoint,
            ) from exc
        except UnicodeDecodeError as exc:
            raise LocshareTransportError(
                f"Undecodable body from {endpoint} (HTTP {status})",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> HTTP %s", method, url, status)

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LocshareTransportError(
                f"Invalid JSON from {endpoint} (HTTP {status}): {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        return status, parsed
