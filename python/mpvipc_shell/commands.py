"""Shell commands and their registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from mpvipc import MPVError

from .context import ShellContext
from .output import emit_error, emit_event, emit_result
from .parser import ParseError, parse_arguments, parse_value, split_command


@dataclass
class Command:
    """Abstract command description."""

    name: str
    description: str
    usage: str = ""
    aliases: Sequence[str] = field(default_factory=tuple)

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        raise NotImplementedError("Command must implement run()")

    def format_help(self) -> str:
        label = f"{self.name} {self.usage}".strip()
        return f"{label:<28} {self.description}"


class CallCommand(Command):
    def __init__(self) -> None:
        super().__init__("call", "Send a raw command and print its reply", "<name> [arg...]")

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        if not argv:
            emit_error(ctx, f"usage: {self.name} {self.usage}")
            return 1
        arguments = [argv[0]] + parse_arguments(argv[1:])
        try:
            value = ctx.ensure_connection().call(*arguments)
        except MPVError as exc:
            emit_error(ctx, str(exc))
            return 1
        emit_result(ctx, value)
        return 0


class GetCommand(Command):
    def __init__(self) -> None:
        super().__init__("get", "Read a property", "<property>")

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        if len(argv) != 1:
            emit_error(ctx, f"usage: {self.name} {self.usage}")
            return 1
        try:
            value = ctx.ensure_connection().get(argv[0])
        except MPVError as exc:
            emit_error(ctx, str(exc))
            return 1
        emit_result(ctx, value)
        return 0


class SetCommand(Command):
    def __init__(self) -> None:
        super().__init__("set", "Write a property", "<property> <value>")

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        if len(argv) != 2:
            emit_error(ctx, f"usage: {self.name} {self.usage}")
            return 1
        prop, raw = argv
        try:
            ctx.ensure_connection().set(prop, parse_value(raw))
        except MPVError as exc:
            emit_error(ctx, str(exc))
            return 1
        emit_result(ctx, None, message=f"{prop} set")
        return 0


class EventsCommand(Command):
    def __init__(self) -> None:
        super().__init__("events", "Toggle printing of player events", "on|off")

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        if not argv:
            state = "on" if ctx.watching_events else "off"
            emit_result(ctx, state, message=f"events {state}")
            return 0
        mode = argv[0].lower()
        if mode == "on":
            try:
                ctx.watch_events(lambda event: emit_event(ctx, event))
            except MPVError as exc:
                emit_error(ctx, str(exc))
                return 1
        elif mode == "off":
            ctx.unwatch_events()
        else:
            emit_error(ctx, f"usage: {self.name} {self.usage}")
            return 1
        emit_result(ctx, mode, message=f"events {mode}")
        return 0


class HelpCommand(Command):
    def __init__(self) -> None:
        super().__init__("help", "Show available commands", aliases=("?",))
        self._registry: Optional[CommandRegistry] = None

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        registry = self._registry
        if not registry:
            return 1
        for command in registry.list_commands():
            ctx.printer(command.format_help())
        return 0


class ExitCommand(Command):
    def __init__(self) -> None:
        super().__init__("exit", "Close the connection and leave", aliases=("quit", "q"))

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        ctx.disconnect()
        raise SystemExit(0)


class CommandRegistry:
    """Stores the known commands and resolves aliases."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}
        self._ordered: List[Command] = []

    def register(self, command: Command) -> None:
        self._ordered.append(command)
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def names(self) -> List[str]:
        return sorted(self._commands)

    def list_commands(self) -> Iterable[Command]:
        return self._ordered


def build_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for command in (
        HelpCommand(),
        CallCommand(),
        GetCommand(),
        SetCommand(),
        EventsCommand(),
        ExitCommand(),
    ):
        registry.register(command)
        if isinstance(command, HelpCommand):
            command.bind(registry)
    return registry


def execute_line(ctx: ShellContext, registry: CommandRegistry, line: str) -> int:
    """Parse and run one shell line; returns the command's exit status."""
    try:
        argv = split_command(line)
    except ParseError as exc:
        emit_error(ctx, f"parse error: {exc}")
        return 1
    if not argv:
        return 0
    cmd_name, *cmd_args = argv
    command = registry.get(cmd_name)
    if command is None:
        emit_error(ctx, f"unknown command: {cmd_name}")
        return 1
    return command.run(ctx, cmd_args)
