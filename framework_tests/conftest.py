import pytest

from topology_tests.cluster_management import hostnames
from topology_tests.utils import commands
from topology_tests.utils import http_client

pytest_plugins = ("pytester", "topology_tests.pytest_plugins.clusters")


@pytest.fixture
def allocator() -> hostnames.NameAllocator:
    return hostnames.NameAllocator()


@pytest.fixture
def events() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def waits(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record delays instead of waiting."""
    recorded: list[float] = []
    monkeypatch.setattr(commands, "wait_for", recorded.append)
    return recorded


@pytest.fixture
def reset_http_session():
    yield
    http_client.set_session(None)
