# tests/routing/test_dijkstra.py
import itertools
import math

import pytest

from pool_dispatch.domain.entities.geography import Edge, Node
from pool_dispatch.domain.graph import build_graph
from pool_dispatch.routing.dijkstra import UNREACHABLE, join_paths, shortest_path
from pool_dispatch.routing.frontier import HeapFrontier, SortedListFrontier

FRONTIERS = [HeapFrontier, SortedListFrontier]


@pytest.fixture
def grid_graph():
    # 3x3 lattice with uneven weights
    edges = []
    for i, j in itertools.product(range(3), range(3)):
        if i + 1 < 3:
            edges.append(Edge(f"{i}{j}", f"{i + 1}{j}", 1 + (i * 3 + j) % 4))
        if j + 1 < 3:
            edges.append(Edge(f"{i}{j}", f"{i}{j + 1}", 2 + (i + j) % 3))
    return build_graph([], edges)


@pytest.mark.parametrize("frontier", FRONTIERS)
def test_triangle_prefers_two_short_hops(triangle_graph, frontier):
    r = shortest_path(triangle_graph, "A", "C", frontier=frontier)
    assert r.distance == 2
    assert r.path == ("A", "B", "C")
    assert r.path_set == {"A", "B", "C"}
    assert r.reachable


def test_source_equals_target(triangle_graph):
    r = shortest_path(triangle_graph, "B", "B")
    assert r.path == ("B",)
    assert r.distance == 0
    assert r.visited == ("B",)


def test_distances_are_symmetric(grid_graph):
    for s, t in itertools.permutations(grid_graph.node_ids, 2):
        assert shortest_path(grid_graph, s, t).distance == shortest_path(grid_graph, t, s).distance


def test_frontiers_give_identical_results(grid_graph):
    for s, t in itertools.product(grid_graph.node_ids, repeat=2):
        a = shortest_path(grid_graph, s, t, frontier=HeapFrontier)
        b = shortest_path(grid_graph, s, t, frontier=SortedListFrontier)
        assert a == b


def test_disjoint_component_is_unreachable():
    g = build_graph([], [Edge("A", "B", 1), Edge("C", "D", 1)])
    r = shortest_path(g, "A", "D")
    assert r.distance == UNREACHABLE == math.inf
    assert r.path == ()
    assert not r.reachable
    assert set(r.visited) == {"A", "B"}  # explored its whole component


@pytest.mark.parametrize("s,t", [("A", "nope"), ("nope", "A"), ("nope", "nope")])
def test_unknown_endpoints_do_not_raise(triangle_graph, s, t):
    r = shortest_path(triangle_graph, s, t)
    assert r.path == ()
    assert r.visited == ()
    assert r.distance == UNREACHABLE


def test_search_stops_at_target():
    g = build_graph([], [Edge("A", "B", 1), Edge("B", "C", 1), Edge("C", "D", 1)])
    r = shortest_path(g, "A", "B")
    assert r.visited == ("A", "B")


def test_visitation_trace_follows_pop_order_with_fifo_ties():
    g = build_graph([], [Edge("S", "X", 1), Edge("S", "Y", 1), Edge("S", "Z", 1), Edge("Z", "T", 5)])
    r = shortest_path(g, "S", "T")
    assert r.visited == ("S", "X", "Y", "Z", "T")
    assert r.path == ("S", "Z", "T")


def test_zero_weight_cycle_terminates():
    g = build_graph(
        [], [Edge("A", "B", 0), Edge("B", "C", 0), Edge("C", "A", 0), Edge("C", "D", 2)]
    )
    r = shortest_path(g, "A", "D")
    assert r.distance == 2
    assert r.path[0] == "A" and r.path[-1] == "D"
    assert len(r.visited) == len(set(r.visited))


def test_repeated_calls_are_identical(grid_graph):
    a = shortest_path(grid_graph, "00", "22")
    b = shortest_path(grid_graph, "00", "22")
    assert a == b
    assert a.visited == b.visited


def test_trace_is_restartable(triangle_graph):
    r = shortest_path(triangle_graph, "A", "C")
    assert list(r.trace()) == list(r.trace()) == list(r.visited)


def test_join_paths_drops_junction_duplicates(triangle_graph):
    legs = [
        shortest_path(triangle_graph, "A", "B"),
        shortest_path(triangle_graph, "B", "C"),
        shortest_path(triangle_graph, "C", "C"),
    ]
    assert join_paths(legs) == ("A", "B", "C")
