"""Custom exception hierarchy for pyinfinitive."""

from __future__ import annotations


class InfinitiveError(Exception):
    """Base exception for all pyinfinitive errors."""


class InfinitiveConfigError(InfinitiveError):
    """Invalid or missing configuration."""


class InfinitiveTransportError(InfinitiveError):
    """Live channel connection failure.

    The channel recovers from these by reconnecting; they are logged and
    never raised to callers of the session.
    """

    def __init__(self, message: str, *, close_code: int | None = None) -> None:
        self.close_code = close_code
        super().__init__(message)


class InfinitiveDecodeError(InfinitiveError):
    """Inbound live channel frame could not be decoded."""

    def __init__(self, message: str, *, frame: str | bytes | None = None) -> None:
        self.frame = frame
        super().__init__(message)


class InfinitiveRequestError(InfinitiveError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

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


class InfinitiveStateError(InfinitiveError):
    """Operation needs mirrored state that has not been received yet."""


class InfinitiveChannelError(InfinitiveError):
    """Live channel used out of order (e.g. started twice)."""
