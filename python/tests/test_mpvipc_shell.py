"""Tests for the mpvipc-shell command layer and entry point."""

from __future__ import annotations

import json

import pytest
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from mpvipc import Event
from mpvipc_shell.cli import main
from mpvipc_shell.commands import build_registry, execute_line
from mpvipc_shell.context import ShellContext
from mpvipc_shell.output import format_event
from mpvipc_shell.parser import ParseError, parse_arguments, parse_value, split_command
from mpvipc_shell.repl import ShellREPL

from player_stubs import wait_for


@pytest.fixture
def shell(player):
    lines = []
    ctx = ShellContext(socket_path="fake", timeout=2.0, dialer=player.dialer, printer=lines.append)
    yield ctx, build_registry(), lines
    ctx.disconnect()


def test_split_command_honours_quotes():
    assert split_command('call loadfile "my movie.mkv" replace') == ["call", "loadfile", "my movie.mkv", "replace"]
    assert split_command("   ") == []
    with pytest.raises(ParseError):
        split_command('call "unterminated')


def test_parse_value_prefers_json_literals():
    assert parse_value("5") == 5
    assert parse_value("-3.5") == -3.5
    assert parse_value("true") is True
    assert parse_value("null") is None
    assert parse_value("[1, 2]") == [1, 2]
    assert parse_value("osd-msg-bar") == "osd-msg-bar"
    assert parse_arguments(["add", "volume", "5"]) == ["add", "volume", 5]


def test_call_command_sends_raw_arguments(shell, player):
    ctx, registry, lines = shell
    player.answer(None)
    assert execute_line(ctx, registry, "call osd-msg-bar add volume -3") == 0
    assert player.requests[0]["command"] == ["osd-msg-bar", "add", "volume", -3]
    assert lines == ["ok"]


def test_get_command_prints_value(shell, player):
    ctx, registry, lines = shell
    player.answer({"w": 1920, "h": 1080})
    assert execute_line(ctx, registry, "get video-params") == 0
    assert json.loads(lines[-1]) == {"w": 1920, "h": 1080}


def test_set_command_reports_protocol_error(shell, player):
    ctx, registry, lines = shell
    player.answer(None, status="property unavailable")
    assert execute_line(ctx, registry, "set speed 2") == 1
    assert player.requests[0]["command"] == ["set_property", "speed", 2]
    assert lines == ["error: mpv error: property unavailable"]


def test_json_output_mode(shell, player):
    ctx, registry, lines = shell
    ctx.json_output = True
    player.answer(12.5)
    assert execute_line(ctx, registry, "get time-pos") == 0
    assert json.loads(lines[-1]) == {"status": "ok", "result": 12.5}


def test_usage_and_unknown_commands(shell, player):
    ctx, registry, lines = shell
    assert execute_line(ctx, registry, "get") == 1
    assert execute_line(ctx, registry, "frobnicate") == 1
    assert lines == ["error: usage: get <property>", "error: unknown command: frobnicate"]
    assert player.dial_count == 0


def test_events_command_toggles_listener(shell, player):
    ctx, registry, lines = shell
    assert execute_line(ctx, registry, "events on") == 0
    assert ctx.watching_events
    player.send({"event": "end-file", "reason": "eof"})
    player.send({"event": "idle"})
    expected = ["events on", "event end-file reason=eof", "event idle"]
    assert wait_for(lambda: lines == expected)
    assert execute_line(ctx, registry, "events off") == 0
    assert not ctx.watching_events
    assert ctx.connection.listener_count() == 0


def test_help_lists_commands(shell):
    ctx, registry, lines = shell
    assert execute_line(ctx, registry, "help") == 0
    names = [line.split()[0] for line in lines]
    assert names == ["help", "call", "get", "set", "events", "exit"]


def test_exit_disconnects(shell, player):
    ctx, registry, _ = shell
    ctx.ensure_connection()
    with pytest.raises(SystemExit):
        execute_line(ctx, registry, "quit")
    assert ctx.connection is None


def test_format_event_shows_set_fields_only():
    assert format_event(Event(name="pause")) == "event pause"
    text = format_event(Event(name="log-message", prefix="cplayer", level="warn", text="oops\n"))
    assert text == "event log-message [cplayer/warn] oops"
    assert format_event(Event(name="property-change", id=3, data=0.5)) == "event property-change id=3 data=0.5"


def test_repl_runs_lines_until_eof(shell, player):
    ctx, registry, lines = shell
    player.answer(False)
    with create_pipe_input() as pipe:
        pipe.send_text("get pause\r\x04")
        repl = ShellREPL(ctx, registry, input=pipe, output=DummyOutput())
        assert repl.run() == 0
    assert lines == ["false"]
    assert ctx.connection is None


def test_main_single_command_against_socket(server, capsys):
    assert main(["--socket", server.path, "-c", "get volume"]) == 0
    assert capsys.readouterr().out.strip() == "50.0"


def test_main_single_command_json_error(server, capsys):
    assert main(["--socket", server.path, "--json", "-c", "get nope"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload == {"status": "error", "error": "mpv error: property not found"}


def test_main_reports_connect_failure(tmp_path, capsys):
    missing = tmp_path / "absent.sock"
    assert main(["--socket", str(missing), "-c", "get pause"]) == 1
    assert "can't connect to mpv's socket" in capsys.readouterr().out
