# geo/cells.py
from collections.abc import Hashable, Iterable, Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Protocol, runtime_checkable

import h3

from pool_dispatch.domain.entities.geography import NodeId
from pool_dispatch.domain.graph import RoadGraph


@runtime_checkable
class CellGrid(Protocol):
    """
    Responsibilities:
      • Map a coordinate to an opaque cell id at a fixed resolution.
      • Enumerate the inclusive disk of cells within `radius` steps of a cell.
    Both must be pure: equal inputs give equal outputs.
    """

    def cell_for(self, lat: float, lon: float) -> Hashable: ...
    def disk(self, cell: Hashable, radius: int) -> Iterable[Hashable]: ...


class H3Grid(CellGrid):
    def __init__(self, resolution: int = 9):
        self.resolution = resolution

    def cell_for(self, lat, lon):
        return h3.latlng_to_cell(lat, lon, self.resolution)

    def disk(self, cell, radius):
        return h3.grid_disk(cell, radius)

    def __repr__(self) -> str:
        return f"H3Grid(resolution={self.resolution})"


class CellIndex:
    """
    Read-only node -> cell mapping, built once per loaded graph.
    Ring lookups are memoized; they are pure so the cache is safe to share.
    """

    def __init__(self, grid: CellGrid, cells: Mapping[NodeId, Hashable], *, ring_cache: int = 4096):
        self.grid = grid
        self._cells = MappingProxyType(dict(cells))
        self._ring = lru_cache(maxsize=ring_cache)(self._compute_ring)

    @property
    def cells(self) -> Mapping[NodeId, Hashable]:
        return self._cells

    def cell_of(self, node_id: NodeId) -> Hashable:
        return self._cells[node_id]

    def ring(self, cell: Hashable, radius: int) -> frozenset:
        if radius < 0:
            raise ValueError(f"radius must be >= 0, got {radius}")
        return self._ring(cell, radius)

    def _compute_ring(self, cell, radius):
        return frozenset(self.grid.disk(cell, radius))

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._cells

    def __len__(self) -> int:
        return len(self._cells)


def build_cell_index(graph: RoadGraph, grid: CellGrid) -> CellIndex:
    """Assign a cell to every node that has coordinates."""
    cells = {nid: grid.cell_for(n.lat, n.lon) for nid, n in graph.nodes.items()}
    return CellIndex(grid, cells)
