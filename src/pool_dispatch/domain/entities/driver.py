# domain/entities/driver.py
from dataclasses import dataclass

from pool_dispatch.domain.entities.geography import CellId, NodeId


@dataclass(frozen=True)
class Driver:
    id: str
    node: NodeId
    cell: CellId | None = None  # derived from the cell index at placement
