"""
mpvipc-shell - interactive driver for the mpvipc client.

Use ``python -m mpvipc_shell`` or the ``mpvipc-shell`` script to open a
prompt against a running mpv started with ``--input-ipc-server``.
"""

from __future__ import annotations

from .cli import main

__all__ = ["main"]
__version__ = "0.1.0"
