"""Custom exception hierarchy for locshare."""

from __future__ import annotations


class LocshareError(Exception):
    """Base exception for all locshare errors."""


class LocshareConfigError(LocshareError):
    """Invalid or missing configuration."""


class LocshareTransportError(LocshareError):
    """HTTP-level failure (network, timeout, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


# ------------------------------------------------------------------
# Snapshot
# ------------------------------------------------------------------


class FetchError(LocshareError):
    """The one-time snapshot fetch failed."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class FetchUnreachableError(FetchError):
    """Backend could not be reached or answered with an unusable payload."""


class LocationNotFoundError(FetchError):
    """Backend reported that the requested location does not exist.

    This is a domain answer, not a transport failure: no placeholder
    record is substituted for it.
    """


# ------------------------------------------------------------------
# Share
# ------------------------------------------------------------------


class ShareError(LocshareError):
    """Sharing the current position failed."""


class InvalidInputError(ShareError):
    """Participant name missing or blank."""


class CapabilityUnavailableError(ShareError):
    """No device position capability is available."""


class CaptureFailedError(ShareError):
    """The device position capability failed to produce a reading."""

    def __init__(self, message: str, *, reason: str = "") -> None:
        self.reason = reason
        super().__init__(message)


class ShareRejectedError(ShareError):
    """Backend rejected the submission (validation error)."""


class ShareUnreachableError(ShareError):
    """Submission could not be delivered to the backend."""


# ------------------------------------------------------------------
# Stream
# ------------------------------------------------------------------


class StreamError(LocshareError):
    """Live push stream failure."""


class StreamConnectError(StreamError):
    """Connecting to the push stream failed."""

    def __init__(self, message: str, *, attempt: int = 0) -> None:
        self.attempt = attempt
        super().__init__(message)


# ------------------------------------------------------------------
# Position providers
# ------------------------------------------------------------------


class PositionCaptureError(LocshareError):
    """Raised by position providers when a reading cannot be taken.

    ``reason`` is one of ``"permission_denied"``, ``"position_unavailable"``
    or ``"timeout"``; the message is meant for display.
    """

    def __init__(self, message: str, *, reason: str = "position_unavailable") -> None:
        self.reason = reason
        super().__init__(message)
