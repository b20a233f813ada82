"""Allocation of unique hostnames for cluster nodes."""

import collections
import threading


class NameAllocator:
    """Issue increasing indexes per hostname prefix.

    Indexes are never reused, so hostnames generated during a single test run are unique even
    when the nodes that used them were already discarded.
    """

    def __init__(self) -> None:
        self._indexes: dict[str, int] = collections.defaultdict(int)
        self._lock = threading.Lock()

    def get_next_index(self, prefix: str) -> int:
        with self._lock:
            index = self._indexes[prefix]
            self._indexes[prefix] = index + 1
        return index

    def get_hostname(self, prefix: str) -> str:
        """Return new hostname in the `{prefix}-{index}` format."""
        return f"{prefix}-{self.get_next_index(prefix)}"


# Process-wide allocator used by node builders unless told otherwise
HOSTNAMES = NameAllocator()
