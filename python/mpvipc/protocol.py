"""Wire codec for mpv's JSON IPC protocol.

Every message is one JSON object terminated by a newline.  Outbound requests
look like ``{"command": [...], "request_id": N}``.  Inbound lines are either
command results (``{"error": "success", "data": ..., "request_id": N}``) or
events (``{"event": "pause", ...}``).  Decoders return ``None`` for lines that
do not qualify instead of raising, so the reader can try both shapes on every
line.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from .errors import EncodeError

Line = Union[bytes, str]

SUCCESS = "success"


@dataclass
class CommandRequest:
    """Outbound command: the first argument is the command name."""

    arguments: List[Any] = field(default_factory=list)
    request_id: int = 0


@dataclass
class CommandResult:
    """Reply to a request, matched by ``request_id``."""

    status: str
    data: Any = None
    request_id: int = 0

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS


@dataclass
class Event:
    """Unsolicited notification from the player.

    ``name`` is always set.  ``reason`` is used by ``end-file``; ``prefix``,
    ``level`` and ``text`` by ``log-message``; ``id`` and ``data`` by
    observed-property changes; ``error`` accompanies ``reason == "error"``.
    """

    name: str
    reason: str = ""
    prefix: str = ""
    level: str = ""
    text: str = ""
    id: int = 0
    data: Any = None
    error: str = ""


def encode_request(request: CommandRequest) -> bytes:
    """Serialise *request* into one newline-terminated line."""
    payload: Dict[str, Any] = {
        "command": list(request.arguments),
        "request_id": request.request_id,
    }
    try:
        text = json.dumps(payload, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"can't encode command: {exc}") from exc
    return text.encode("utf-8") + b"\n"


def build_request(request_id: int, arguments: Sequence[Any]) -> bytes:
    return encode_request(CommandRequest(arguments=list(arguments), request_id=request_id))


def _load_object(line: Line) -> Optional[Dict[str, Any]]:
    try:
        payload = json.loads(line)
    except (ValueError, UnicodeDecodeError, RecursionError):
        # RecursionError: nesting deeper than the decoder can follow.
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def _uint(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected unsigned integer, got {value!r}")
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected string, got {value!r}")
    return value


def decode_result(line: Line) -> Optional[CommandResult]:
    """Return the command result carried by *line*, or ``None``.

    A line is a result only when its ``error`` field is a non-empty string.
    """
    payload = _load_object(line)
    if payload is None:
        return None
    try:
        status = _text(payload.get("error"))
        request_id = _uint(payload.get("request_id"))
    except ValueError:
        return None
    if not status:
        return None
    return CommandResult(status=status, data=payload.get("data"), request_id=request_id)


def decode_event(line: Line) -> Optional[Event]:
    """Return the event carried by *line*, or ``None``.

    A line is an event only when its ``event`` field is a non-empty string and
    every optional field has the expected type.
    """
    payload = _load_object(line)
    if payload is None:
        return None
    try:
        name = _text(payload.get("event"))
        if not name:
            return None
        return Event(
            name=name,
            reason=_text(payload.get("reason")),
            prefix=_text(payload.get("prefix")),
            level=_text(payload.get("level")),
            text=_text(payload.get("text")),
            id=_uint(payload.get("id")),
            data=payload.get("data"),
            error=_text(payload.get("error")),
        )
    except ValueError:
        return None


__all__ = [
    "SUCCESS",
    "CommandRequest",
    "CommandResult",
    "Event",
    "encode_request",
    "build_request",
    "decode_result",
    "decode_event",
]
