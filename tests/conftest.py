# tests/conftest.py
import pytest

from pool_dispatch.dispatch.hooks import NoopHooks
from pool_dispatch.domain.entities.driver import Driver
from pool_dispatch.domain.entities.geography import Edge, Node
from pool_dispatch.domain.entities.rider import Rider
from pool_dispatch.domain.graph import build_graph
from pool_dispatch.geo.cells import CellGrid, build_cell_index


class AxialHexGrid(CellGrid):
    """
    Exact hex grid for tests: a node at (lat=r, lon=q) lives in axial cell (q, r).
    disk(c, k) is every cell within hex distance k, so radius 1 is the 7-cell disk.
    """

    def cell_for(self, lat, lon):
        return (round(lon), round(lat))

    def disk(self, cell, radius):
        q0, r0 = cell
        out = []
        for dq in range(-radius, radius + 1):
            for dr in range(max(-radius, -dq - radius), min(radius, -dq + radius) + 1):
                out.append((q0 + dq, r0 + dr))
        return out

    @staticmethod
    def distance(a, b) -> int:
        dq, dr = a[0] - b[0], a[1] - b[1]
        return (abs(dq) + abs(dr) + abs(dq + dr)) // 2


class RecordingHooks(NoopHooks):
    def __init__(self):
        self.calls: list[tuple[str, dict]] = []

    def _rec(name):
        def fn(self, **kw):
            self.calls.append((name, kw))

        return fn

    search_ring = _rec("search_ring")
    search_fallback = _rec("search_fallback")
    match_done = _rec("match_done")
    no_match = _rec("no_match")
    pool_evaluated = _rec("pool_evaluated")
    pool_done = _rec("pool_done")
    no_pool_route = _rec("no_pool_route")
    cancelled = _rec("cancelled")

    def names(self) -> list[str]:
        return [n for n, _ in self.calls]


def place(index, cls, eid, node):
    return cls(eid, node, index.cell_of(node))


# ---------- Fixtures


@pytest.fixture
def hex_grid() -> AxialHexGrid:
    return AxialHexGrid()


@pytest.fixture
def hooks() -> RecordingHooks:
    return RecordingHooks()


@pytest.fixture
def triangle_graph():
    # A-B (1), B-C (1), A-C (5)
    nodes = [Node("A", 0, 0), Node("B", 0, 1), Node("C", 1, 1)]
    edges = [Edge("A", "B", 1), Edge("B", "C", 1), Edge("A", "C", 5)]
    return build_graph(nodes, edges)


@pytest.fixture
def pool_world(hex_grid):
    """
    Line D1 - A - B - X - DEST (unit weights) plus a spur Y -0.5- B for driver D2.

        cells: D1 (0,0)  A (1,0)  B (2,0)  X (3,0)  DEST (4,0)  Y (2,1)
    A's closest driver is D1; B's closest driver is D2.
    """
    nodes = [
        Node("D1", 0, 0),
        Node("A", 0, 1),
        Node("B", 0, 2),
        Node("X", 0, 3),
        Node("DEST", 0, 4),
        Node("Y", 1, 2),
    ]
    edges = [
        Edge("D1", "A", 1),
        Edge("A", "B", 1),
        Edge("B", "X", 1),
        Edge("X", "DEST", 1),
        Edge("Y", "B", 0.5),
    ]
    g = build_graph(nodes, edges)
    idx = build_cell_index(g, hex_grid)
    drivers = [place(idx, Driver, "d1", "D1"), place(idx, Driver, "d2", "Y")]
    riders = {"a": place(idx, Rider, "a", "A"), "b": place(idx, Rider, "b", "B")}
    return g, idx, drivers, riders


@pytest.fixture
def node_link():
    """Node-link dict shaped like an OSM export, laid out on the axial test grid."""
    return {
        "directed": False,
        "nodes": [
            {"id": 1, "x": 0, "y": 0, "street_count": 3},
            {"id": 2, "x": 1, "y": 0},
            {"id": 3, "x": 2, "y": 0},
            {"id": 4, "x": 3, "y": 0},
            {"id": 5, "x": 1, "y": 1},
        ],
        "links": [
            {"source": 1, "target": 2, "length": 10.0, "highway": "residential"},
            {"source": 2, "target": 3, "length": 10.0},
            {"source": 3, "target": 4, "length": 10.0},
            {"source": 2, "target": 5, "length": 4.0},
        ],
    }
