"""Shared shell state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from mpvipc import Connection, ConnectionConfig, Event
from mpvipc.transport import DEFAULT_SOCKET_PATH, Dialer

LOGGER = logging.getLogger("mpvipc_shell.context")


@dataclass
class ShellContext:
    """Holds the connection and output preferences for one shell run."""

    socket_path: str = DEFAULT_SOCKET_PATH
    timeout: Optional[float] = 5.0
    json_output: bool = False
    dialer: Optional[Dialer] = None
    printer: Callable[[str], None] = print
    _connection: Optional[Connection] = field(default=None, init=False, repr=False)
    _stop_events: Optional[Callable[[], None]] = field(default=None, init=False, repr=False)

    def ensure_connection(self) -> Connection:
        """Open the connection on first use, or again after the player went away."""
        conn = self._connection
        if conn is None:
            config = ConnectionConfig(socket_path=self.socket_path, call_timeout=self.timeout)
            conn = Connection(config=config, dialer=self.dialer)
            self._connection = conn
        if conn.is_closed():
            LOGGER.debug("opening %s", self.socket_path)
            conn.open()
        return conn

    @property
    def connection(self) -> Optional[Connection]:
        return self._connection

    @property
    def watching_events(self) -> bool:
        return self._stop_events is not None

    def watch_events(self, handler: Callable[[Event], None]) -> None:
        if self._stop_events is not None:
            return
        self._stop_events = self.ensure_connection().listen_for_events(handler)

    def unwatch_events(self) -> None:
        stop = self._stop_events
        self._stop_events = None
        if stop is not None:
            stop()

    def disconnect(self) -> None:
        self.unwatch_events()
        conn = self._connection
        if conn is None:
            return
        try:
            conn.close()
        except OSError as exc:
            LOGGER.debug("connection close failed: %s", exc)
        self._connection = None
