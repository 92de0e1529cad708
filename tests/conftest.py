import socket

import pytest

from pulse.config import HostConfig


@pytest.fixture
def unused_port():
    """A localhost TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def make_hosts():
    def _make(count: int) -> list[HostConfig]:
        return [
            HostConfig(name=f"host-{i}", host=f"10.0.0.{i}", user="admin")
            for i in range(count)
        ]
    return _make
