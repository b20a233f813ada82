"""Capabilities of nodes that can be members of a cluster."""

from topology_tests.utils import configuration
from topology_tests.utils import helpers


class ClusterNode:
    """Generic cluster node.

    The node gets its hostname from a node builder right after it is constructed. The IP address
    is known only after the node was started.
    """

    service_port: int = 0

    def __init__(self) -> None:
        self.hostname = ""

    @property
    def ip(self) -> str:
        return ""

    def start(self) -> None:
        msg = f"Not implemented for node type '{self.__class__.__name__}'."
        raise NotImplementedError(msg)

    def clear(self) -> None:
        """Stop the node and release all its resources."""
        msg = f"Not implemented for node type '{self.__class__.__name__}'."
        raise NotImplementedError(msg)

    def stop(self) -> None:
        self.clear()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(hostname={self.hostname!r})"


class DockerClusterNode(ClusterNode):
    """Node running in a container, possibly with its service port published on the docker host."""

    @property
    def mapped_port(self) -> int | None:
        """Port on the docker host that is bound to the service port, if any."""
        return None

    @property
    def external_ip(self) -> str:
        return helpers.get_docker_host_name(configuration.DOCKER_HOST)
