"""Exception hierarchy for mpvipc."""

from __future__ import annotations

from typing import Optional


class MPVError(RuntimeError):
    """Base class for every error raised by the client."""


class AlreadyOpenError(MPVError):
    """Raised when ``open()`` is called on a connection that is already open."""


class ConnectError(MPVError):
    """Raised when the transport cannot reach the player's socket."""


class NotOpenError(MPVError):
    """Raised when an operation needs an open connection and there is none."""


class EncodeError(MPVError):
    """Raised when command arguments cannot be serialised to JSON."""


class WriteError(MPVError):
    """Raised when a request line cannot be written to the stream."""


class ProtocolError(MPVError):
    """Raised (or delivered) when the player answers with a non-success status."""

    def __init__(self, status: str, request_id: Optional[int] = None) -> None:
        super().__init__(f"mpv error: {status}")
        self.status = status
        self.request_id = request_id


class CallTimeoutError(MPVError):
    """Raised when a blocking call does not complete before its deadline."""


class CallCancelledError(MPVError):
    """Raised when a blocking call is abandoned through its cancel token."""
