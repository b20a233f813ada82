"""Cluster nodes that don't start any real infrastructure."""

import itertools
import threading
import typing as tp

from topology_tests.cluster_management import nodes
from topology_tests.utils import http

_IP_SUFFIXES = itertools.count(2)
_IP_LOCK = threading.Lock()


def _next_ip() -> str:
    with _IP_LOCK:
        suffix = next(_IP_SUFFIXES)
    return f"172.17.{suffix // 250}.{suffix % 250}"


class FakeNode(nodes.ClusterNode):
    """Node that only records what happened to it."""

    service_port = 9000

    def __init__(
        self,
        peers: tp.Iterable[str] = (),
        *,
        events: list[tuple[str, str]] | None = None,
        fail_start: bool = False,
        fail_clear: bool = False,
        on_start: tp.Callable[[], None] | None = None,
    ) -> None:
        super().__init__()
        self.peers = list(peers)
        self.hostname_at_init = self.hostname
        self.events = events if events is not None else []
        self.fail_start = fail_start
        self.fail_clear = fail_clear
        self.on_start = on_start
        self.started = False
        self._ip = ""

    @property
    def ip(self) -> str:
        return self._ip

    def start(self) -> None:
        if self.on_start:
            self.on_start()
        if self.fail_start:
            msg = f"Node '{self.hostname}' failed to start."
            raise RuntimeError(msg)
        self._ip = _next_ip()
        self.started = True
        self.events.append(("start", self.hostname))

    def clear(self) -> None:
        if self.fail_clear:
            msg = f"Node '{self.hostname}' failed to clear."
            raise RuntimeError(msg)
        self._ip = ""
        self.started = False
        self.events.append(("clear", self.hostname))


class FakeDockerNode(http.HttpEnabled, nodes.DockerClusterNode, FakeNode):
    """Container node with optionally published service port."""

    service_port = 8080

    def __init__(self, peers: tp.Iterable[str] = (), *, port: int | None = None) -> None:
        super().__init__(peers)
        self.port = port

    @property
    def mapped_port(self) -> int | None:
        return self.port
