# routing/dijkstra.py
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from pool_dispatch.domain.entities.geography import NodeId
from pool_dispatch.domain.graph import RoadGraph
from pool_dispatch.routing.frontier import Frontier, HeapFrontier

UNREACHABLE = math.inf


@dataclass(frozen=True)
class PathResult:
    source: NodeId
    target: NodeId
    path: tuple[NodeId, ...]  # source..target, empty when unreachable
    visited: tuple[NodeId, ...]  # nodes in finalization order
    distance: float = UNREACHABLE
    path_set: frozenset[NodeId] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "path_set", frozenset(self.path))

    @property
    def reachable(self) -> bool:
        return self.distance != UNREACHABLE

    def trace(self) -> Iterator[NodeId]:
        """Fresh iterator over the visitation trace (for animation/diagnostics)."""
        return iter(self.visited)


def unreachable(source: NodeId, target: NodeId, visited=()) -> PathResult:
    return PathResult(source, target, (), tuple(visited), UNREACHABLE)


def shortest_path(
    graph: RoadGraph,
    source: NodeId,
    target: NodeId,
    *,
    frontier: Callable[[], Frontier] = HeapFrontier,
) -> PathResult:
    """
    Single-pair Dijkstra over non-negative weights with early exit at `target`.

    Unknown endpoints or a disconnected target give an empty path and an
    infinite distance rather than an exception.
    """
    if source not in graph or target not in graph:
        return unreachable(source, target)

    dist: dict[NodeId, float] = {source: 0.0}
    prev: dict[NodeId, NodeId] = {}
    done: set[NodeId] = set()
    visited: list[NodeId] = []

    q = frontier()
    q.push(source, 0.0)
    while q:
        u, _ = q.pop()
        if u in done:
            continue  # stale duplicate
        done.add(u)
        visited.append(u)
        if u == target:
            break
        du = dist[u]
        for v, w in graph.neighbors(u):
            nd = du + w
            if nd < dist.get(v, UNREACHABLE):
                dist[v] = nd
                prev[v] = u
                q.push(v, nd)

    if target not in done:
        return unreachable(source, target, visited)

    path = [target]
    while path[-1] != source:
        path.append(prev[path[-1]])
    path.reverse()
    return PathResult(source, target, tuple(path), tuple(visited), dist[target])


def join_paths(results) -> tuple[NodeId, ...]:
    """Concatenate consecutive segments, dropping each repeated junction node."""
    out: list[NodeId] = []
    for r in results:
        out.extend(r.path if not out else r.path[1:])
    return tuple(out)
