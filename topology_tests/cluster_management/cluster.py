"""Generic cluster of test infrastructure nodes."""

import concurrent.futures
import logging
import types as tt
import typing as tp

from topology_tests.cluster_management import node_builder
from topology_tests.cluster_management import nodes
from topology_tests.utils import commands
from topology_tests.utils import configuration
from topology_tests.utils import execution
from topology_tests.utils import helpers

LOGGER = logging.getLogger(__name__)

TNode = tp.TypeVar("TNode", bound=nodes.ClusterNode)
TDockerNode = tp.TypeVar("TDockerNode", bound=nodes.DockerClusterNode)

PredicateFactory = tp.Callable[[TNode], execution.Execution[bool]]


class NoSuchNodeError(LookupError):
    pass


class ClusterStartError(RuntimeError):
    """Failure to start one or more nodes of a cluster."""

    def __init__(self, errors: list[tuple[str, Exception]]) -> None:
        self.errors = errors
        err_lines = "\n".join(f"  {hostname}: {err!r}" for hostname, err in errors)
        super().__init__(f"Failed to start {len(errors)} node(s):\n{err_lines}")


class ClusterStopError(RuntimeError):
    """Failure to clear one or more nodes of a cluster."""

    def __init__(self, errors: list[tuple[str, Exception]]) -> None:
        self.errors = errors
        err_lines = "\n".join(f"  {hostname}: {err!r}" for hostname, err in errors)
        super().__init__(f"Failed to clear {len(errors)} node(s):\n{err_lines}")


def _is_satisfied(pred: execution.Execution[bool]) -> bool:
    return bool(pred.result())


class Cluster(tp.Generic[TNode]):
    """Ordered collection of nodes of the same type, with common lifecycle and queries.

    Nodes are started in parallel by default. When `parallel` is `False`, nodes are started
    one by one in the order they were added, with a pause after each node start.
    """

    def __init__(self, nodes: tp.Iterable[TNode] = (), *, parallel: bool = True) -> None:
        self.nodes: list[TNode] = list(nodes)
        self.parallel = parallel

    def before_start(self) -> None:
        """Run before any node is started."""

    def after_start(self) -> None:
        """Run after all nodes were started."""

    def start(self) -> None:
        self.before_start()

        LOGGER.info(
            f"Starting {len(self.nodes)} node(s) of {self!r} "
            f"{'in parallel' if self.parallel else 'sequentially'}."
        )
        if self.parallel:
            self._start_parallel()
        else:
            self._start_sequential()

        self.after_start()

    def _start_sequential(self) -> None:
        for node in self.nodes:
            LOGGER.debug(f"Starting node '{node.hostname}'.")
            try:
                node.start()
            except Exception as exc:
                LOGGER.error(f"Failed to start node '{node.hostname}': {exc}")
                raise ClusterStartError(errors=[(node.hostname, exc)]) from exc
            commands.wait_for(configuration.SEQUENTIAL_START_DELAY)

    def _start_parallel(self) -> None:
        if not self.nodes:
            return

        num_threads = min(configuration.MAX_START_WORKERS, len(self.nodes))
        with concurrent.futures.ThreadPoolExecutor(max_workers=num_threads) as executor:
            futures = {executor.submit(node.start): node for node in self.nodes}
            # Wait for all starts, so no node is left starting in the background
            concurrent.futures.wait(futures)

        errors: list[tuple[str, Exception]] = []
        for future, node in futures.items():
            exc = future.exception()
            if exc is None:
                continue
            if not isinstance(exc, Exception):
                raise exc
            LOGGER.error(f"Failed to start node '{node.hostname}': {exc}")
            errors.append((node.hostname, exc))

        if errors:
            raise ClusterStartError(errors=errors) from errors[0][1]

    def stop(self) -> None:
        """Stop and clear all nodes. The nodes stay members of the cluster.

        All nodes are cleared even if clearing some of them fails.
        """
        LOGGER.info(f"Stopping {len(self.nodes)} node(s) of {self!r}.")
        errors: list[tuple[str, Exception]] = []
        for node in self.nodes:
            LOGGER.debug(f"Clearing node '{node.hostname}'.")
            try:
                node.clear()
            except Exception as exc:
                LOGGER.error(f"Failed to clear node '{node.hostname}': {exc}")
                errors.append((node.hostname, exc))

        if errors:
            raise ClusterStopError(errors=errors) from errors[0][1]

    @tp.overload
    def add(self, builder: node_builder.SingleNodeBuilder[TNode]) -> TNode: ...

    @tp.overload
    def add(self, builder: node_builder.MultipleNodeBuilder[TNode]) -> list[TNode]: ...

    def add(self, builder: node_builder.ClusterNodeBuilder[TNode]) -> TNode | list[TNode]:
        """Build new nodes and append them to the cluster.

        Returns the new node for a single node builder, list of new nodes otherwise.
        """
        new_nodes = builder.build(self.hostnames)
        self.nodes.extend(new_nodes)

        if not isinstance(builder, node_builder.SingleNodeBuilder):
            return new_nodes

        if not new_nodes:
            msg = (
                f"Trying to add a single node '{builder.hostname_prefix}', "
                "but 0 nodes were built."
            )
            raise NoSuchNodeError(msg)
        return new_nodes[0]

    @property
    def hostnames(self) -> list[str]:
        return [n.hostname for n in self.nodes]

    @property
    def internal_connection_string(self) -> str:
        """Return `hostname:service_port` of all nodes separated by ','.

        To be used by components running in the same network as the cluster nodes.
        """
        return helpers.join_endpoints((n.hostname, n.service_port) for n in self.nodes)

    def get_node(self, hostname: str) -> TNode:
        for node in self.nodes:
            if node.hostname == hostname:
                return node

        msg = f"Node with name '{hostname}' was not found within {','.join(self.hostnames)}"
        raise NoSuchNodeError(msg)

    def get_node_from_ip(self, ip: str) -> TNode:
        """Return the node with given IP. Nodes that were not started have no IP."""
        if ip:
            for node in self.nodes:
                if node.ip == ip:
                    return node

        known_ips = ",".join(n.ip for n in self.nodes if n.ip)
        msg = f"Node with IP '{ip}' was not found within {known_ips}"
        raise NoSuchNodeError(msg)

    def find_the_node_which(
        self, predicate_factory: PredicateFactory[TNode]
    ) -> execution.Execution[TNode]:
        """Return execution that finds the first node for which the predicate holds.

        Nodes and predicates are evaluated every time the returned execution is evaluated.
        """

        def _find() -> TNode:
            for node in list(self.nodes):
                if _is_satisfied(predicate_factory(node)):
                    return node
            msg = f"No node matching the predicate was found within {','.join(self.hostnames)}"
            raise NoSuchNodeError(msg)

        return execution.Execution(_find).labeled("node matching predicate")

    def filter_the_nodes_with_condition(
        self, predicate_factory: PredicateFactory[TNode]
    ) -> execution.Execution[list[TNode]]:
        """Return execution that selects all nodes for which the predicate holds."""

        def _filter() -> list[TNode]:
            return [n for n in list(self.nodes) if _is_satisfied(predicate_factory(n))]

        return execution.Execution(_filter).labeled("nodes filtered")

    def __len__(self) -> int:
        return len(self.nodes)

    def __bool__(self) -> bool:
        # A cluster without nodes is still a valid cluster
        return True

    def __iter__(self) -> tp.Iterator[TNode]:
        return iter(list(self.nodes))

    def __enter__(self) -> tp.Self:
        try:
            self.start()
        except Exception:
            # Some of the nodes might have been started already
            try:
                self.stop()
            except ClusterStopError as stop_err:
                LOGGER.error(f"Failed to clean up {self!r} after failed start: {stop_err}")
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: tt.TracebackType | None,
    ) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({','.join(self.hostnames)})"


class DockerCluster(Cluster[TDockerNode]):
    """Cluster of nodes running in containers."""

    @property
    def external_connection_string(self) -> str:
        """Return `host:mapped_port` of all nodes that publish their port on the docker host.

        To be used by components running outside of the docker network, e.g. by the tests.
        """
        host_name = helpers.get_docker_host_name(configuration.DOCKER_HOST)
        return helpers.join_endpoints(
            (host_name, n.mapped_port) for n in self.nodes if n.mapped_port is not None
        )
