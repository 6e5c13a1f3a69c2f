# domain/graph.py
from collections.abc import Iterable, Iterator, Mapping
from math import isfinite
from numbers import Real
from types import MappingProxyType

from pool_dispatch.domain.entities.geography import Edge, Node, NodeId
from pool_dispatch.errors import GraphValidationError

Neighbor = tuple[NodeId, float]

_NO_NEIGHBORS: tuple[Neighbor, ...] = ()


class RoadGraph:
    """
    Undirected weighted road graph.

    Adjacency maps node id -> ordered tuple of (neighbor_id, weight); every edge
    is stored in both directions. Built once by `build_graph` and never mutated,
    so a single instance can be shared by concurrent solver calls.
    """

    def __init__(self, adjacency: Mapping[NodeId, tuple[Neighbor, ...]], nodes: Mapping[NodeId, Node]):
        self._adj = MappingProxyType(dict(adjacency))
        self._nodes = MappingProxyType(dict(nodes))
        self._edge_count = sum(len(v) for v in self._adj.values()) // 2

    @property
    def adjacency(self) -> Mapping[NodeId, tuple[Neighbor, ...]]:
        return self._adj

    @property
    def nodes(self) -> Mapping[NodeId, Node]:
        """Node records that came with coordinates (may be a subset of node_ids)."""
        return self._nodes

    @property
    def node_ids(self) -> tuple[NodeId, ...]:
        return tuple(self._adj)

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def neighbors(self, node_id: NodeId) -> tuple[Neighbor, ...]:
        # unknown ids have no neighbors; keeps the solver loop branch-free
        return self._adj.get(node_id, _NO_NEIGHBORS)

    def node(self, node_id: NodeId) -> Node:
        return self._nodes[node_id]

    def coord(self, node_id: NodeId) -> tuple[float, float]:
        n = self._nodes[node_id]
        return n.lat, n.lon

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._adj

    def __len__(self) -> int:
        return len(self._adj)

    def __iter__(self) -> Iterator[NodeId]:
        return iter(self._adj)

    def __repr__(self) -> str:
        return f"RoadGraph(nodes={len(self)}, edges={self._edge_count})"


def _valid_weight(w) -> bool:
    return isinstance(w, Real) and not isinstance(w, bool) and isfinite(float(w)) and w >= 0


def build_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> RoadGraph:
    """
    Build the adjacency structure from node records and edges.

    Raises GraphValidationError listing every malformed record; a bad edge
    rejects the whole build rather than silently shrinking the graph.
    """
    problems: list[str] = []
    node_map: dict[NodeId, Node] = {}
    adj: dict[NodeId, list[Neighbor]] = {}

    for n in nodes:
        nid = str(n.id)
        if nid in node_map:
            problems.append(f"duplicate node {nid!r}")
            continue
        if not (_valid_coord(n.lat) and _valid_coord(n.lon)):
            problems.append(f"node {nid!r} has non-finite coordinate ({n.lat!r}, {n.lon!r})")
            continue
        node_map[nid] = n if n.id == nid else Node(nid, n.lat, n.lon)
        adj.setdefault(nid, [])

    for i, e in enumerate(edges):
        if e.source is None or e.target is None:
            problems.append(f"edge #{i} is missing an endpoint")
            continue
        if not _valid_weight(e.length):
            problems.append(
                f"edge #{i} {e.source!s}-{e.target!s} has invalid length {e.length!r}"
            )
            continue
        u, v, w = str(e.source), str(e.target), float(e.length)
        adj.setdefault(u, []).append((v, w))
        adj.setdefault(v, []).append((u, w))

    if problems:
        raise GraphValidationError(problems)

    return RoadGraph({k: tuple(v) for k, v in adj.items()}, node_map)


def _valid_coord(x) -> bool:
    return isinstance(x, Real) and not isinstance(x, bool) and isfinite(float(x))
