"""Staged builders for adding nodes to a cluster.

A builder is usable only once the number of nodes, the hostname prefix and the way the nodes are
constructed are all known:

    cluster.add(
        node_builder.multiple_nodes(3)
        .named("zookeeper")
        .constructed_like(lambda hostnames: ZookeeperNode(peers=hostnames))
    )

Names of all nodes in a batch are allocated before the first node is constructed. Every node
constructor receives hostnames of the nodes that are already in the cluster, followed by
hostnames of all nodes of the batch, so e.g. a list of peers can be passed to the node
before any node is started.
"""

import dataclasses
import inspect
import logging
import typing as tp

from topology_tests.cluster_management import hostnames
from topology_tests.cluster_management import nodes

LOGGER = logging.getLogger(__name__)

TNode = tp.TypeVar("TNode", bound=nodes.ClusterNode)
NodeTemplate = tp.Callable[[list[str]], TNode]


class InvalidConfigurationError(RuntimeError):
    pass


def _get_default_allocator() -> hostnames.NameAllocator:
    return hostnames.HOSTNAMES


def _accepts_hostnames(template: tp.Callable) -> bool:
    """Check if the template can be called with the list of hostnames."""
    try:
        signature = inspect.signature(template)
    except (TypeError, ValueError):
        # Signature not available, e.g. for some builtins
        return True

    positional_kinds = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.VAR_POSITIONAL,
    )
    return any(p.kind in positional_kinds for p in signature.parameters.values())


def _as_node_template(template: tp.Callable[..., TNode]) -> NodeTemplate[TNode]:
    if not callable(template):
        msg = f"Node template must be callable, got '{template!r}'."
        raise TypeError(msg)

    if _accepts_hostnames(template):
        return template

    def _ignore_hostnames(_hostnames: list[str]) -> TNode:
        return template()

    return _ignore_hostnames


@dataclasses.dataclass(frozen=True)
class ClusterNodeBuilder(tp.Generic[TNode]):
    hostname_prefix: str
    node_template: NodeTemplate[TNode]
    number_of_nodes: int = 1
    allocator: hostnames.NameAllocator = dataclasses.field(
        default_factory=_get_default_allocator, repr=False, compare=False
    )

    def build(self, existing_hostnames: tp.Iterable[str] = ()) -> list[TNode]:
        """Allocate hostnames and construct new nodes.

        Args:
            existing_hostnames: Hostnames of nodes that are already members of the cluster.

        Returns:
            list[TNode]: Newly constructed nodes, with hostnames already assigned.
        """
        # Allocate all names first, constructors can use any of them
        new_hostnames = [
            self.allocator.get_hostname(self.hostname_prefix) for __ in range(self.number_of_nodes)
        ]
        full_hostnames = [*existing_hostnames, *new_hostnames]

        new_nodes = []
        for hostname in new_hostnames:
            node = self.node_template(list(full_hostnames))
            node.hostname = hostname
            new_nodes.append(node)

        LOGGER.debug(f"Built nodes: {', '.join(new_hostnames)}")
        return new_nodes


@dataclasses.dataclass(frozen=True)
class MultipleNodeBuilder(ClusterNodeBuilder[TNode]):
    pass


@dataclasses.dataclass(frozen=True)
class SingleNodeBuilder(ClusterNodeBuilder[TNode]):
    def build_single(self, existing_hostnames: tp.Iterable[str] = ()) -> TNode:
        built = self.build(existing_hostnames)
        if not built:
            msg = (
                f"Cannot build a single node with prefix '{self.hostname_prefix}' "
                f"when the number of nodes is {self.number_of_nodes}."
            )
            raise InvalidConfigurationError(msg)
        return built[0]


def _check_prefix(hostname_prefix: str) -> None:
    if not hostname_prefix:
        msg = "Hostname prefix cannot be empty."
        raise ValueError(msg)


@dataclasses.dataclass(frozen=True)
class SingleNodeBuilderStepTwo:
    hostname_prefix: str
    allocator: hostnames.NameAllocator = dataclasses.field(
        default_factory=_get_default_allocator, repr=False, compare=False
    )

    def constructed_like(self, template: tp.Callable[..., TNode]) -> SingleNodeBuilder[TNode]:
        """Set how the node is constructed.

        The template is called either with the list of all hostnames, or without arguments.
        """
        return SingleNodeBuilder(
            hostname_prefix=self.hostname_prefix,
            node_template=_as_node_template(template),
            allocator=self.allocator,
        )


@dataclasses.dataclass(frozen=True)
class SingleNodeBuilderStepOne:
    allocator: hostnames.NameAllocator = dataclasses.field(
        default_factory=_get_default_allocator, repr=False, compare=False
    )

    def named(self, hostname_prefix: str) -> SingleNodeBuilderStepTwo:
        _check_prefix(hostname_prefix)
        return SingleNodeBuilderStepTwo(hostname_prefix=hostname_prefix, allocator=self.allocator)


@dataclasses.dataclass(frozen=True)
class MultipleNodeBuilderStepTwo:
    number_of_nodes: int
    hostname_prefix: str
    allocator: hostnames.NameAllocator = dataclasses.field(
        default_factory=_get_default_allocator, repr=False, compare=False
    )

    def constructed_like(self, template: tp.Callable[..., TNode]) -> MultipleNodeBuilder[TNode]:
        """Set how the nodes are constructed.

        The template is called once per node, either with the list of all hostnames,
        or without arguments.
        """
        return MultipleNodeBuilder(
            hostname_prefix=self.hostname_prefix,
            node_template=_as_node_template(template),
            number_of_nodes=self.number_of_nodes,
            allocator=self.allocator,
        )


@dataclasses.dataclass(frozen=True)
class MultipleNodeBuilderStepOne:
    number_of_nodes: int
    allocator: hostnames.NameAllocator = dataclasses.field(
        default_factory=_get_default_allocator, repr=False, compare=False
    )

    def named(self, hostname_prefix: str) -> MultipleNodeBuilderStepTwo:
        _check_prefix(hostname_prefix)
        return MultipleNodeBuilderStepTwo(
            number_of_nodes=self.number_of_nodes,
            hostname_prefix=hostname_prefix,
            allocator=self.allocator,
        )


def one_node(allocator: hostnames.NameAllocator | None = None) -> SingleNodeBuilderStepOne:
    """Start specification of a builder for a single node."""
    if allocator is None:
        return SingleNodeBuilderStepOne()
    return SingleNodeBuilderStepOne(allocator=allocator)


def multiple_nodes(
    number_of_nodes: int, allocator: hostnames.NameAllocator | None = None
) -> MultipleNodeBuilderStepOne:
    """Start specification of a builder for given number of nodes."""
    if number_of_nodes < 1:
        msg = f"Invalid number of nodes '{number_of_nodes}': must be >= 1"
        raise ValueError(msg)
    if allocator is None:
        return MultipleNodeBuilderStepOne(number_of_nodes=number_of_nodes)
    return MultipleNodeBuilderStepOne(number_of_nodes=number_of_nodes, allocator=allocator)
