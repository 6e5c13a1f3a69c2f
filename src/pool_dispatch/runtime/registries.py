# runtime/registries.py
from collections.abc import Callable
from typing import Any

from pool_dispatch.config.models import GraphByName, GraphByPath, GraphRef, GridH3Model, GridUnion
from pool_dispatch.domain.graph import RoadGraph
from pool_dispatch.geo.cells import CellGrid, H3Grid
from pool_dispatch.io.graph_data import graph_from_node_link
from pool_dispatch.routing.frontier import Frontier, HeapFrontier, SortedListFrontier
from pool_dispatch.runtime.resources import load_graph_data

GridFactory = Callable[[GridUnion, dict], CellGrid]
FrontierFactory = Callable[[], Frontier]

_grid_registry: dict[str, GridFactory] = {}
_frontier_registry: dict[str, FrontierFactory] = {}


# ------------------- Cell grids ---------------------------


def register_grid(kind: str):
    def deco(fn: GridFactory):
        _grid_registry[kind] = fn
        return fn

    return deco


def make_grid(cfg: GridUnion, *, deps: dict | None = None) -> CellGrid:
    try:
        factory = _grid_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown grid kind {cfg.kind!r}") from None
    return factory(cfg, deps or {})


@register_grid("h3")
def _make_h3(cfg: GridH3Model, deps):
    return H3Grid(resolution=cfg.resolution)


# ------------------- Solver frontiers ---------------------------


def register_frontier(kind: str):
    def deco(cls: FrontierFactory):
        _frontier_registry[kind] = cls
        return cls

    return deco


def make_frontier(kind: str) -> FrontierFactory:
    try:
        return _frontier_registry[kind]
    except KeyError:
        raise ValueError(f"Unknown frontier kind {kind!r}") from None


register_frontier("heap")(HeapFrontier)
register_frontier("sorted_list")(SortedListFrontier)


# ------------------- Graphs ---------------------------


def resolve_graph(ref: GraphRef | None, *, deps: dict[str, Any]) -> RoadGraph:
    """
    deps can include:
      - 'graphs': dict[str, RoadGraph]  # prebuilt graphs by name
      - 'graph_data': Mapping            # node-link data to build from
    """
    if ref is None:
        if deps.get("graph_data") is not None:
            return graph_from_node_link(deps["graph_data"])
        raise ValueError("No graph provided")
    if isinstance(ref, GraphByName):
        return deps["graphs"][ref.name]  # raises KeyError if missing
    if isinstance(ref, GraphByPath):
        data = load_graph_data(ref.file, ref.fmt)
        if data is None:
            if ref.must_exist:
                raise FileNotFoundError(ref.file)
            data = {"nodes": [], "links": []}
        return graph_from_node_link(data)
    raise TypeError(ref)
