# routing/frontier.py
import heapq
from bisect import insort
from typing import Protocol, runtime_checkable

from pool_dispatch.domain.entities.geography import NodeId


@runtime_checkable
class Frontier(Protocol):
    """
    Min-priority queue of (node, distance) candidates for Dijkstra.
    Equal distances pop in insertion order so visitation traces are reproducible.
    A node may be queued several times; the solver discards stale entries.
    """

    def push(self, node: NodeId, distance: float) -> None: ...
    def pop(self) -> tuple[NodeId, float]: ...
    def __len__(self) -> int: ...


class HeapFrontier(Frontier):
    def __init__(self):
        self._q: list[tuple[float, int, NodeId]] = []
        self._seq = 0

    def push(self, node, distance):
        self._seq += 1
        heapq.heappush(self._q, (distance, self._seq, node))

    def pop(self):
        d, _, node = heapq.heappop(self._q)
        return node, d

    def __len__(self):
        return len(self._q)


class SortedListFrontier(Frontier):
    """Sorted-list baseline: O(n) insert. Fine for a few thousand nodes."""

    def __init__(self):
        self._q: list[tuple[float, int, NodeId]] = []
        self._seq = 0

    def push(self, node, distance):
        self._seq += 1
        insort(self._q, (distance, self._seq, node))

    def pop(self):
        d, _, node = self._q.pop(0)
        return node, d

    def __len__(self):
        return len(self._q)
