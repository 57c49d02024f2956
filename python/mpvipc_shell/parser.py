"""Command-line parsing helpers for the shell."""

from __future__ import annotations

import json
import shlex
from typing import Any, List, Sequence


class ParseError(ValueError):
    """Raised when a shell line cannot be tokenised."""


def split_command(line: str) -> List[str]:
    """Split a shell line into tokens using POSIX shlex rules."""
    if not line or not line.strip():
        return []
    try:
        return shlex.split(line, comments=True, posix=True)
    except ValueError as exc:
        raise ParseError(str(exc)) from exc


def parse_value(token: str) -> Any:
    """Interpret *token* as a JSON literal, falling back to the raw string.

    ``5`` becomes an int, ``true`` a bool, ``[1,2]`` a list; ``pause`` and
    ``osd-msg-bar`` stay strings.
    """
    try:
        return json.loads(token)
    except ValueError:
        return token


def parse_arguments(tokens: Sequence[str]) -> List[Any]:
    return [parse_value(token) for token in tokens]
