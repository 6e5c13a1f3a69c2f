# dispatch/outcomes.py
from dataclasses import dataclass
from typing import Literal

from pool_dispatch.domain.entities.driver import Driver
from pool_dispatch.domain.entities.geography import NodeId
from pool_dispatch.errors import DispatchError
from pool_dispatch.geo.candidates import CandidateSearch
from pool_dispatch.routing.dijkstra import PathResult


@dataclass(frozen=True)
class Match:
    driver: Driver
    path: PathResult  # driver location -> rider pickup
    search: CandidateSearch

    @property
    def distance(self) -> float:
        return self.path.distance


@dataclass(frozen=True)
class NoMatch:
    reason: Literal["no_candidates", "unreachable"]
    error: DispatchError
    search: CandidateSearch | None = None

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class PoolEvaluation:
    driver_id: str
    order: tuple[str, ...]  # rider ids in pickup order
    cost: float
    feasible: bool


@dataclass(frozen=True)
class Route:
    driver: Driver
    order: tuple[str, ...]
    path: tuple[NodeId, ...]
    cost: float
    segments: tuple[PathResult, ...]
    evaluations: tuple[PoolEvaluation, ...] = ()


@dataclass(frozen=True)
class NoRoute:
    reason: Literal["no_driver", "infeasible"]
    error: DispatchError
    evaluations: tuple[PoolEvaluation, ...] = ()

    def __bool__(self) -> bool:
        return False
