from dataclasses import dataclass


# Core graph records; coordinates are WGS84 degrees
@dataclass(frozen=True)
class Node:
    id: str
    lat: float
    lon: float


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    length: float  # traversal cost, >= 0


NodeId = str
CellId = object  # opaque token from the cell grid
