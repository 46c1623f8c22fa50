"""Client configuration for locshare."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from locshare._constants import BASE_URL, PAGE_URL
from locshare.exceptions import LocshareConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise LocshareConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class LocshareConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend base address serving ``/api/locations`` and the push stream.
    page_url : str
        Address of the current page. Its ``locationId`` query parameter
        selects single-location mode and its origin prefixes share links.
    reconnection_attempts : int
        Reconnection attempts made by the push stream before giving up.
    reconnection_delay : float
        Seconds to wait before each reconnection attempt.
    stream_enabled : bool
        Open the live push stream on startup.
    stream_queue_size : int
        Capacity of the queue buffering inbound push events.
    request_timeout : float or None
        Total timeout for HTTP requests in seconds. ``None`` leaves the
        transport's own default in place.
    """

    base_url: str = BASE_URL
    page_url: str = PAGE_URL
    reconnection_attempts: int = 3
    reconnection_delay: float = 1.0
    stream_enabled: bool = True
    stream_queue_size: int = 256
    request_timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.base_url.strip():
            raise LocshareConfigError("base_url must be non-empty")
        if self.reconnection_attempts < 0:
            raise LocshareConfigError("reconnection_attempts must be >= 0")
        if self.reconnection_delay < 0:
            raise LocshareConfigError("reconnection_delay must be >= 0")
        if self.stream_queue_size <= 0:
            raise LocshareConfigError("stream_queue_size must be > 0")
        # Trailing slashes would double up when endpoints are appended.
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> LocshareConfig:
        """Create configuration from ``LOCSHARE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        _ENV_CONFIG_MAP = {
            "LOCSHARE_BASE_URL": "base_url",
            "LOCSHARE_PAGE_URL": "page_url",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        attempts_env = env.get("LOCSHARE_RECONNECTION_ATTEMPTS")
        if attempts_env is not None and "reconnection_attempts" not in overrides:
            config_kwargs["reconnection_attempts"] = _env_number("LOCSHARE_RECONNECTION_ATTEMPTS", attempts_env, int)

        delay_env = env.get("LOCSHARE_RECONNECTION_DELAY")
        if delay_env is not None and "reconnection_delay" not in overrides:
            config_kwargs["reconnection_delay"] = _env_number("LOCSHARE_RECONNECTION_DELAY", delay_env, float)

        queue_env = env.get("LOCSHARE_STREAM_QUEUE_SIZE")
        if queue_env is not None and "stream_queue_size" not in overrides:
            config_kwargs["stream_queue_size"] = _env_number("LOCSHARE_STREAM_QUEUE_SIZE", queue_env, int)

        timeout_env = env.get("LOCSHARE_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = _env_number("LOCSHARE_REQUEST_TIMEOUT", timeout_env, float)

        if "stream_enabled" not in overrides:
            config_kwargs["stream_enabled"] = _env_bool(env.get("LOCSHARE_STREAM_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
