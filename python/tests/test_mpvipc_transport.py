import os
import socket
import tempfile

import pytest

from mpvipc import ConnectError, Connection, ConnectionConfig, ProtocolError, QueueListener
from mpvipc.transport import SocketStream, dial


def test_dial_missing_socket_raises_connect_error():
    path = os.path.join(tempfile.gettempdir(), "mpvipc-does-not-exist.sock")
    with pytest.raises(ConnectError) as excinfo:
        dial(ConnectionConfig(socket_path=path, connect_timeout=0.2))
    assert "can't connect" in str(excinfo.value)


def test_socket_stream_reads_lines_and_writes():
    left, right = socket.socketpair()
    stream = SocketStream(left)
    try:
        right.sendall(b'{"event":"idle"}\n{"event":"pause"}\n')
        assert stream.readline() == b'{"event":"idle"}\n'
        assert stream.readline() == b'{"event":"pause"}\n'
        stream.write(b"ping\n")
        assert right.recv(16) == b"ping\n"
    finally:
        stream.close()
        right.close()


def test_round_trip_over_unix_socket(server):
    conn = Connection(server.path)
    conn.open()
    try:
        assert conn.get("volume") == 50.0
        assert conn.call("get_version") == 65536
        with pytest.raises(ProtocolError):
            conn.get("no-such-property")
    finally:
        conn.close()
    assert conn.is_closed()


def test_set_over_unix_socket_emits_event(server):
    events = QueueListener()
    with Connection(server.path) as conn:
        conn.listen_for_events(events)
        conn.set("pause", True, timeout=2.0)
        assert conn.get("pause", timeout=2.0) is True
    event = events.get(timeout=1.0)
    assert event.name == "property-change"
    assert event.data is True
    assert server.requests[0] == {"command": ["set_property", "pause", True], "request_id": 1}


def test_server_shutdown_closes_connection(server):
    conn = Connection(server.path)
    conn.open()
    assert conn.get("pause", timeout=2.0) is False
    server.stop()
    conn.join_reader(timeout=2.0)
    assert conn.is_closed()
