import concurrent.futures
import dataclasses

import pytest
from fake_nodes import FakeNode

from topology_tests.cluster_management import hostnames
from topology_tests.cluster_management import node_builder


class TestMultipleNodeBuilder:
    def test_build(self, allocator: hostnames.NameAllocator):
        builder = (
            node_builder.multiple_nodes(3, allocator=allocator)
            .named("node")
            .constructed_like(FakeNode)
        )
        built = builder.build()

        assert [n.hostname for n in built] == ["node-0", "node-1", "node-2"]
        assert all(isinstance(n, FakeNode) for n in built)

    def test_names_unique_over_builds(self, allocator: hostnames.NameAllocator):
        builder = (
            node_builder.multiple_nodes(2, allocator=allocator)
            .named("node")
            .constructed_like(FakeNode)
        )
        hostnames_built = [n.hostname for __ in range(3) for n in builder.build()]

        assert hostnames_built == [f"node-{i}" for i in range(6)]

    def test_names_unique_under_concurrency(self, allocator: hostnames.NameAllocator):
        builder = (
            node_builder.multiple_nodes(2, allocator=allocator)
            .named("node")
            .constructed_like(FakeNode)
        )

        with concurrent.futures.ThreadPoolExecutor(max_workers=3) as executor:
            futures = [executor.submit(builder.build) for __ in range(3)]
        hostnames_built = [n.hostname for f in futures for n in f.result()]

        assert sorted(hostnames_built) == sorted(f"node-{i}" for i in range(6))

    def test_full_names_visible(self, allocator: hostnames.NameAllocator):
        """Every node of the batch gets all existing and all new hostnames."""
        existing = ["seed-0", "seed-1"]
        seen_names: list[list[str]] = []

        def _template(names: list[str]) -> FakeNode:
            seen_names.append(names)
            return FakeNode(names)

        builder = (
            node_builder.multiple_nodes(5, allocator=allocator)
            .named("node")
            .constructed_like(_template)
        )
        built = builder.build(existing)

        expected = [*existing, *(f"node-{i}" for i in range(5))]
        assert len(seen_names) == 5
        assert seen_names[2] == expected
        assert all(names == expected for names in seen_names)
        assert all(n.peers == expected for n in built)

    def test_hostname_assigned_after_construction(self, allocator: hostnames.NameAllocator):
        builder = (
            node_builder.multiple_nodes(2, allocator=allocator)
            .named("node")
            .constructed_like(FakeNode)
        )
        built = builder.build()

        assert [n.hostname_at_init for n in built] == ["", ""]
        assert [n.hostname for n in built] == ["node-0", "node-1"]

    def test_template_without_arguments(self, allocator: hostnames.NameAllocator):
        builder = (
            node_builder.multiple_nodes(2, allocator=allocator)
            .named("node")
            .constructed_like(lambda: FakeNode(["static"]))
        )
        built = builder.build(["other-0"])

        assert [n.peers for n in built] == [["static"], ["static"]]

    def test_template_gets_own_list(self, allocator: hostnames.NameAllocator):
        def _template(names: list[str]) -> FakeNode:
            names.append("garbage")
            return FakeNode(names)

        builder = (
            node_builder.multiple_nodes(2, allocator=allocator)
            .named("node")
            .constructed_like(_template)
        )
        built = builder.build()

        assert built[1].peers == ["node-0", "node-1", "garbage"]

    def test_invalid_number_of_nodes(self):
        with pytest.raises(ValueError, match="must be >= 1"):
            node_builder.multiple_nodes(0)

    def test_empty_prefix(self):
        with pytest.raises(ValueError, match="prefix cannot be empty"):
            node_builder.multiple_nodes(2).named("")

    def test_template_not_callable(self):
        with pytest.raises(TypeError, match="must be callable"):
            node_builder.multiple_nodes(2).named("node").constructed_like(
                "FakeNode"  # type: ignore
            )

    def test_steps_are_immutable(self):
        step = node_builder.multiple_nodes(2).named("node")
        with pytest.raises(dataclasses.FrozenInstanceError):
            step.hostname_prefix = "other"  # type: ignore


class TestSingleNodeBuilder:
    def test_build_single(self, allocator: hostnames.NameAllocator):
        builder = node_builder.one_node(allocator=allocator).named("db").constructed_like(FakeNode)

        node = builder.build_single(["app-0"])

        assert node.hostname == "db-0"
        assert node.peers == ["app-0", "db-0"]
        assert builder.number_of_nodes == 1

    def test_build_single_zero_nodes(self, allocator: hostnames.NameAllocator):
        builder = node_builder.one_node(allocator=allocator).named("db").constructed_like(FakeNode)
        zero_builder = dataclasses.replace(builder, number_of_nodes=0)

        with pytest.raises(node_builder.InvalidConfigurationError, match="'db'"):
            zero_builder.build_single()

    def test_default_allocator(self, monkeypatch: pytest.MonkeyPatch):
        allocator = hostnames.NameAllocator()
        allocator.get_next_index("db")
        monkeypatch.setattr(hostnames, "HOSTNAMES", allocator)

        node = node_builder.one_node().named("db").constructed_like(FakeNode).build_single()

        assert node.hostname == "db-1"
