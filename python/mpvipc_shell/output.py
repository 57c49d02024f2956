"""Output helpers for the shell."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict

from mpvipc import Event

from .context import ShellContext


def _json_dump(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True)


def emit_result(ctx: ShellContext, value: Any, *, message: str = "") -> None:
    """Emit the value returned by a command."""
    if ctx.json_output:
        ctx.printer(_json_dump({"status": "ok", "result": value}))
    elif message:
        ctx.printer(message)
    elif value is not None:
        ctx.printer(json.dumps(value))
    else:
        ctx.printer("ok")


def emit_error(ctx: ShellContext, message: str) -> None:
    if ctx.json_output:
        ctx.printer(_json_dump({"status": "error", "error": message}))
    else:
        ctx.printer(f"error: {message}")


def format_event(event: Event) -> str:
    """One-line rendering of an event, showing only the fields that are set."""
    parts = [f"event {event.name}"]
    if event.reason:
        parts.append(f"reason={event.reason}")
    if event.error:
        parts.append(f"error={event.error}")
    if event.prefix or event.level or event.text:
        parts.append(f"[{event.prefix}/{event.level}] {event.text.rstrip()}")
    if event.id:
        parts.append(f"id={event.id}")
    if event.data is not None:
        parts.append(f"data={json.dumps(event.data)}")
    return " ".join(parts)


def emit_event(ctx: ShellContext, event: Event) -> None:
    if ctx.json_output:
        ctx.printer(_json_dump({"status": "event", "event": asdict(event)}))
    else:
        ctx.printer(format_event(event))


__all__ = ["emit_result", "emit_error", "emit_event", "format_event"]
