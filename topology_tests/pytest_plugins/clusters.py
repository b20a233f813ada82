"""Pytest plugin with fixtures for managing cluster lifecycle in tests.

Enable it in `conftest.py`:

    pytest_plugins = ("topology_tests.pytest_plugins.clusters",)
"""

import logging
import typing as tp

import pytest

from topology_tests.cluster_management import cluster

LOGGER = logging.getLogger(__name__)

TCluster = tp.TypeVar("TCluster", bound=cluster.Cluster)


@pytest.fixture
def start_cluster() -> tp.Generator[tp.Callable[[TCluster], TCluster], None, None]:
    """Start clusters and stop them when the test finishes.

    Clusters are stopped in reverse order. All clusters are stopped even if stopping
    some of them fails; the first failure is re-raised afterwards.
    """
    started: list[cluster.Cluster] = []

    def _start(cluster_obj: TCluster) -> TCluster:
        # Register first, so partially started cluster is stopped as well
        started.append(cluster_obj)
        cluster_obj.start()
        return cluster_obj

    yield _start

    first_err: Exception | None = None
    for cluster_obj in reversed(started):
        try:
            cluster_obj.stop()
        except Exception as exc:
            LOGGER.error(f"Failed to stop {cluster_obj!r}: {exc}")
            if first_err is None:
                first_err = exc

    if first_err is not None:
        raise first_err
