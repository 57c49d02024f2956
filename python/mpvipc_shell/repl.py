"""Interactive prompt for mpvipc-shell."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from mpvipc import MPVError

from .commands import CommandRegistry, execute_line
from .context import ShellContext
from .output import emit_error

LOGGER = logging.getLogger("mpvipc_shell.repl")


class ShellREPL:
    """prompt_toolkit loop that feeds each line to the command registry."""

    def __init__(
        self,
        ctx: ShellContext,
        registry: CommandRegistry,
        *,
        history_path: Optional[Path] = None,
        input: Any = None,
        output: Any = None,
    ) -> None:
        self.ctx = ctx
        self.registry = registry
        self.history_path = history_path
        self._input = input
        self._output = output

    def _build_session(self) -> PromptSession:
        if self.history_path is not None:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
            history = FileHistory(str(self.history_path))
        else:
            history = InMemoryHistory()
        completer = WordCompleter(self.registry.names(), sentence=True)
        return PromptSession(
            "mpv> ",
            history=history,
            completer=completer,
            input=self._input,
            output=self._output,
        )

    def run(self) -> int:
        session = self._build_session()
        try:
            while True:
                try:
                    # Events printed from the reader thread must not corrupt the prompt.
                    with patch_stdout():
                        line = session.prompt()
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    return 0
                self.dispatch(line)
        finally:
            self.ctx.disconnect()

    def dispatch(self, line: str) -> int:
        try:
            return execute_line(self.ctx, self.registry, line)
        except SystemExit:
            raise
        except (MPVError, OSError) as exc:
            LOGGER.debug("command failed", exc_info=True)
            emit_error(self.ctx, str(exc))
            return 1
