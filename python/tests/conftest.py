"""
Pytest configuration and fixtures for mpvipc tests.
"""
import pytest

from mpvipc import Connection, ConnectionConfig

from player_stubs import DummyPlayerServer, FakePlayer


@pytest.fixture
def player():
    fake = FakePlayer()
    yield fake
    fake.close()


@pytest.fixture
def conn(player):
    """Open connection wired to the scripted player; replies time out after 2s."""
    connection = Connection(config=ConnectionConfig(socket_path="fake", call_timeout=2.0), dialer=player.dialer)
    connection.open()
    yield connection
    connection.close()
    connection.join_reader(timeout=1.0)


@pytest.fixture
def server():
    dummy = DummyPlayerServer()
    yield dummy
    dummy.stop()
