"""
mpvipc - client for mpv's JSON IPC socket.

The package correlates replies with the requests that caused them and fans
unsolicited events out to listeners, while a single background thread drains
the socket.  Each module keeps one responsibility:

    protocol.py   → wire codec (request lines, results, events)
    transport.py  → socket dialing & line-oriented stream
    listeners.py  → event listener variants
    connection.py → lifecycle, request correlation, event dispatch
    errors.py     → exception hierarchy
"""

from .connection import Connection, ResultCallback  # noqa: F401
from .errors import (  # noqa: F401
    AlreadyOpenError,
    CallCancelledError,
    CallTimeoutError,
    ConnectError,
    EncodeError,
    MPVError,
    NotOpenError,
    ProtocolError,
    WriteError,
)
from .listeners import (  # noqa: F401
    CallbackListener,
    EventListener,
    FilteredListener,
    QueueListener,
)
from .protocol import CommandRequest, CommandResult, Event  # noqa: F401
from .transport import ConnectionConfig, SocketStream, Stream, dial  # noqa: F401

__all__ = [
    "Connection",
    "ConnectionConfig",
    "ResultCallback",
    "Stream",
    "SocketStream",
    "dial",
    "Event",
    "CommandRequest",
    "CommandResult",
    "EventListener",
    "CallbackListener",
    "FilteredListener",
    "QueueListener",
    "MPVError",
    "AlreadyOpenError",
    "ConnectError",
    "NotOpenError",
    "EncodeError",
    "WriteError",
    "ProtocolError",
    "CallTimeoutError",
    "CallCancelledError",
]

__version__ = "0.1.0"
