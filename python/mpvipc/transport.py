"""
Transport layer for mpvipc.

Responsibilities:
    * Dial the player's local IPC socket.
    * Expose the connected socket as a line-oriented duplex stream.

The connection core only needs ``readline``/``write``/``close``; anything that
provides those three (see :class:`Stream`) can be plugged in through a custom
dialer.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .errors import ConnectError

logger = logging.getLogger(__name__)

DEFAULT_SOCKET_PATH = "/tmp/mpv_socket"


@dataclass
class ConnectionConfig:
    socket_path: str = DEFAULT_SOCKET_PATH
    connect_timeout: float = 2.0
    # None keeps call() blocking until the reply arrives.
    call_timeout: Optional[float] = None
    clear_pending_on_open: bool = True


class Stream(Protocol):
    def readline(self) -> bytes:
        ...

    def write(self, data: bytes) -> None:
        ...

    def close(self) -> None:
        ...


Dialer = Callable[[ConnectionConfig], Stream]


class SocketStream:
    """Line reader/writer over a connected stream socket."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._reader = sock.makefile("rb")

    def readline(self) -> bytes:
        return self._reader.readline()

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def close(self) -> None:
        # Wake a reader blocked in readline() before tearing the file down.
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            self._reader.close()
        finally:
            self._sock.close()


def dial(config: ConnectionConfig) -> SocketStream:
    """Connect to the Unix socket named by ``config.socket_path``."""
    family = getattr(socket, "AF_UNIX", None)
    if family is None:
        raise ConnectError("can't connect to mpv's socket: AF_UNIX sockets are not supported here")
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.settimeout(config.connect_timeout)
        sock.connect(config.socket_path)
        sock.settimeout(None)
    except OSError as exc:
        sock.close()
        raise ConnectError(f"can't connect to mpv's socket: {exc}") from exc
    logger.debug("connected to %s", config.socket_path)
    return SocketStream(sock)
