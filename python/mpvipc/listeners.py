"""Event listener variants for mpvipc.

Listeners are invoked on the connection's reader thread, so ``notify`` must
return quickly.  :class:`QueueListener` is the non-blocking option for
consumers that want to process events on their own thread.
"""

from __future__ import annotations

import queue
from typing import Callable, Collection, Optional

from .protocol import Event

EventCallback = Callable[[Event], None]


class EventListener:
    """Receives every event dispatched by a connection."""

    def notify(self, event: Event) -> None:
        raise NotImplementedError("EventListener must implement notify()")


class CallbackListener(EventListener):
    def __init__(self, callback: EventCallback) -> None:
        self.callback = callback

    def notify(self, event: Event) -> None:
        self.callback(event)


class FilteredListener(EventListener):
    """Forward only events matching the given names and/or property id."""

    def __init__(
        self,
        inner: EventListener,
        *,
        names: Optional[Collection[str]] = None,
        property_id: Optional[int] = None,
    ) -> None:
        self.inner = inner
        self.names = frozenset(names) if names else None
        self.property_id = property_id

    def matches(self, event: Event) -> bool:
        if self.names is not None and event.name not in self.names:
            return False
        if self.property_id is not None and event.id != self.property_id:
            return False
        return True

    def notify(self, event: Event) -> None:
        if self.matches(event):
            self.inner.notify(event)


class QueueListener(EventListener):
    """Buffer events for a consumer thread; the oldest event is dropped when full."""

    def __init__(self, maxsize: int = 256) -> None:
        self._queue: "queue.Queue[Event]" = queue.Queue(maxsize=max(1, maxsize))
        self.dropped = 0

    def notify(self, event: Event) -> None:
        while True:
            try:
                self._queue.put_nowait(event)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                    self.dropped += 1
                except queue.Empty:
                    pass

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        """Return the next event, or ``None`` if none arrived within *timeout*."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[Event]:
        events: list[Event] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events


def as_listener(listener: "EventListener | EventCallback") -> EventListener:
    if isinstance(listener, EventListener):
        return listener
    if callable(listener):
        return CallbackListener(listener)
    raise TypeError(f"expected EventListener or callable, got {type(listener).__name__}")


__all__ = [
    "EventCallback",
    "EventListener",
    "CallbackListener",
    "FilteredListener",
    "QueueListener",
    "as_listener",
]
