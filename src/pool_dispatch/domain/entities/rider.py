# domain/entities/rider.py
from dataclasses import dataclass

from pool_dispatch.domain.entities.geography import CellId, NodeId


@dataclass(frozen=True)
class Rider:
    id: str
    pickup: NodeId
    cell: CellId | None = None
