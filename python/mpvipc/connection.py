"""Connection to a running mpv instance over its JSON IPC socket.

One background reader thread per open connection drains the stream, routes
command results to the callback registered for their ``request_id`` and fans
events out to every registered listener.  The stream handle, both id counters,
the pending-request table and the listener registry are guarded by a single
lock; callbacks always run outside it, on the reader thread.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from .errors import (
    AlreadyOpenError,
    CallCancelledError,
    CallTimeoutError,
    ConnectError,
    MPVError,
    NotOpenError,
    ProtocolError,
    WriteError,
)
from .listeners import EventCallback, EventListener, as_listener
from .protocol import CommandResult, Event, build_request, decode_event, decode_result
from .transport import ConnectionConfig, Dialer, Stream, dial

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Any, Optional[Exception]], None]

_WAIT_SLICE = 0.05
# Upper bound on the hand-off between the reader claiming a reply and the
# waiting caller seeing it.
_CLAIM_GRACE = 1.0


class Connection:
    """Client side of one socket-backed session with the player."""

    def __init__(
        self,
        socket_path: Optional[str] = None,
        *,
        config: Optional[ConnectionConfig] = None,
        dialer: Optional[Dialer] = None,
    ) -> None:
        config = config or ConnectionConfig()
        if socket_path is not None:
            config = replace(config, socket_path=socket_path)
        self.config = config
        self._dialer: Dialer = dialer or dial

        self._lock = threading.Lock()
        self._open_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._stream: Optional[Stream] = None
        self._reader_thread: Optional[threading.Thread] = None
        self._last_request = 0
        self._pending: Dict[int, ResultCallback] = {}
        self._last_listener = 0
        self._listeners: Dict[int, EventListener] = {}

    def __repr__(self) -> str:
        state = "closed" if self.is_closed() else "open"
        return f"<Connection {self.config.socket_path!r} {state}>"

    def __enter__(self) -> "Connection":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    #
    # Lifecycle
    #
    def open(self) -> None:
        """Connect to the socket and start the reader thread."""
        with self._open_lock:
            with self._lock:
                if self._stream is not None:
                    raise AlreadyOpenError("already open")
            try:
                stream = self._dialer(self.config)
            except OSError as exc:
                raise ConnectError(f"can't connect to mpv's socket: {exc}") from exc
            dropped: Dict[int, ResultCallback] = {}
            with self._lock:
                self._stream = stream
                if self.config.clear_pending_on_open:
                    dropped = self._pending
                    self._pending = {}
                thread = threading.Thread(
                    target=self._reader_loop,
                    args=(stream,),
                    name="mpvipc-reader",
                    daemon=True,
                )
                self._reader_thread = thread
            thread.start()
        logger.debug("opened %s", self.config.socket_path)
        for request_id, callback in dropped.items():
            error = CallCancelledError(f"request {request_id} dropped on reopen")
            self._complete(request_id, callback, None, error)

    def close(self) -> None:
        """Close the socket.  Calling this on a closed connection is a no-op."""
        with self._lock:
            stream = self._stream
            self._stream = None
        if stream is None:
            return
        logger.debug("closing %s", self.config.socket_path)
        stream.close()

    def is_closed(self) -> bool:
        with self._lock:
            return self._stream is None

    def join_reader(self, timeout: Optional[float] = None) -> None:
        """Wait for the current reader thread to exit (mostly useful in tests)."""
        thread = self._reader_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    #
    # Requests
    #
    def send_command(self, request_id: int, *arguments: Any) -> None:
        """Low-level send: write one request line without waiting for a reply."""
        with self._lock:
            stream = self._stream
        if stream is None:
            raise NotOpenError("trying to send command on closed mpv client")
        data = build_request(request_id, arguments)
        try:
            with self._write_lock:
                stream.write(data)
        except OSError as exc:
            raise WriteError(f"can't write command: {exc}") from exc

    def call_async(self, callback: Optional[ResultCallback], *arguments: Any) -> int:
        """Send a command; *callback* later receives ``(data, error)``.

        The callback runs on the reader thread, so it should not block.  If the
        send fails the callback is unregistered before the error propagates.
        Returns the request id, which can be passed to :meth:`cancel_request`.
        """
        with self._lock:
            self._last_request += 1
            request_id = self._last_request
            if callback is not None:
                self._pending[request_id] = callback
        try:
            self.send_command(request_id, *arguments)
        except MPVError:
            if callback is not None:
                self.cancel_request(request_id)
            raise
        return request_id

    def call(
        self,
        *arguments: Any,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Any:
        """Send a command and block until its reply arrives.

        *timeout* (or ``config.call_timeout`` when omitted) bounds the wait and
        *cancel* abandons it once set; with neither, the wait is unbounded.
        """
        done = threading.Event()
        outcome: Dict[str, Any] = {}

        def complete(value: Any, error: Optional[Exception]) -> None:
            outcome["value"] = value
            outcome["error"] = error
            done.set()

        request_id = self.call_async(complete, *arguments)
        if timeout is None:
            timeout = self.config.call_timeout
        if not _wait(done, timeout, cancel):
            if self.cancel_request(request_id):
                if cancel is not None and cancel.is_set():
                    raise CallCancelledError(f"request {request_id} cancelled")
                raise CallTimeoutError(f"request {request_id} timed out after {timeout}s")
            # Already claimed by the reader or by a reopen; the outcome is about to land.
            if not done.wait(_CLAIM_GRACE):
                raise CallTimeoutError(f"request {request_id} timed out after {timeout}s")
        error = outcome.get("error")
        if error is not None:
            raise error
        return outcome.get("value")

    def cancel_request(self, request_id: int) -> bool:
        """Forget the callback for *request_id*; returns False if it was not pending."""
        with self._lock:
            return self._pending.pop(request_id, None) is not None

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def set(self, prop: str, value: Any, **kwargs: Any) -> None:
        """Shortcut for ``call("set_property", prop, value)``."""
        self.call("set_property", prop, value, **kwargs)

    def set_async(
        self,
        prop: str,
        value: Any,
        callback: Optional[Callable[[Optional[Exception]], None]] = None,
    ) -> int:
        """Set a property without waiting; *callback* receives only the error."""
        wrapped: Optional[ResultCallback] = None
        if callback is not None:
            wrapped = lambda _value, error: callback(error)  # noqa: E731
        return self.call_async(wrapped, "set_property", prop, value)

    def get(self, prop: str, **kwargs: Any) -> Any:
        """Shortcut for ``call("get_property", prop)``."""
        return self.call("get_property", prop, **kwargs)

    #
    # Events
    #
    def listen_for_events(self, listener: "EventListener | EventCallback") -> Callable[[], None]:
        """Register *listener* and return a function that unregisters it.

        Listeners are notified on the reader thread and must not block.
        The returned function is idempotent.
        """
        target = as_listener(listener)
        with self._lock:
            self._last_listener += 1
            listener_id = self._last_listener
            self._listeners[listener_id] = target

        def unregister() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unregister

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    #
    # Reader
    #
    def _reader_loop(self, stream: Stream) -> None:
        try:
            while True:
                try:
                    line = stream.readline()
                except (OSError, ValueError) as exc:
                    # ValueError: the file object was closed under us.
                    logger.debug("reader stopped: %s", exc)
                    break
                if not line:
                    logger.debug("reader reached end of stream")
                    break
                line = line.strip()
                if not line:
                    continue
                self._dispatch_line(line)
        finally:
            self._teardown(stream)

    def _dispatch_line(self, line: bytes) -> None:
        event = decode_event(line)
        if event is not None:
            self._dispatch_event(event)
        result = decode_result(line)
        if result is not None:
            self._dispatch_result(result)
        if event is None and result is None:
            logger.debug("skipping unrecognised line: %r", line[:200])

    def _dispatch_event(self, event: Event) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener.notify(event)
            except Exception:
                logger.exception("event listener failed on %r", event.name)

    def _dispatch_result(self, result: CommandResult) -> None:
        with self._lock:
            callback = self._pending.pop(result.request_id, None)
        if callback is None:
            logger.debug("no pending request for id %s", result.request_id)
            return
        if result.ok:
            self._complete(result.request_id, callback, result.data, None)
        else:
            self._complete(result.request_id, callback, None, ProtocolError(result.status, result.request_id))

    def _complete(
        self,
        request_id: int,
        callback: ResultCallback,
        value: Any,
        error: Optional[Exception],
    ) -> None:
        try:
            callback(value, error)
        except Exception:
            logger.exception("completion callback failed for request %s", request_id)

    def _teardown(self, stream: Stream) -> None:
        with self._lock:
            if self._stream is not stream:
                return
            self._stream = None
        try:
            stream.close()
        except OSError as exc:
            logger.debug("close after reader exit failed: %s", exc)


def _wait(done: threading.Event, timeout: Optional[float], cancel: Optional[threading.Event]) -> bool:
    if cancel is None:
        return done.wait(timeout)
    # An Event cannot wait on two events at once, so poll the cancel token.
    deadline = None if timeout is None else time.monotonic() + timeout
    while not cancel.is_set():
        step = _WAIT_SLICE
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return done.is_set()
            step = min(step, remaining)
        if done.wait(step):
            return True
    return done.is_set()
