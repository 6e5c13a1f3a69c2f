# app/session.py
from collections.abc import Callable, Sequence

from pool_dispatch.config.models import MatchingModel, PoolModel
from pool_dispatch.dispatch.hooks import DispatchHooks, NoopHooks
from pool_dispatch.dispatch.matcher import match_driver
from pool_dispatch.dispatch.outcomes import Match, NoMatch, NoRoute, Route
from pool_dispatch.dispatch.parallel import CancelToken
from pool_dispatch.dispatch.pool import plan_shared_route
from pool_dispatch.domain.entities.driver import Driver
from pool_dispatch.domain.entities.geography import NodeId
from pool_dispatch.domain.entities.rider import Rider
from pool_dispatch.domain.graph import RoadGraph
from pool_dispatch.geo.cells import CellIndex
from pool_dispatch.io.business_events import (
    DriverMatchedBiz,
    DriverRemovedBiz,
    DriversPlacedBiz,
    NoMatchBiz,
    NoPoolRouteBiz,
    PoolRoutedBiz,
    RiderPlacedBiz,
    SessionResetBiz,
)
from pool_dispatch.io.recorder import Recorder
from pool_dispatch.routing.dijkstra import PathResult, shortest_path
from pool_dispatch.routing.frontier import Frontier, HeapFrontier
from pool_dispatch.runtime.rng import RNGStreams


class DispatchSession:
    """
    Owns the drivers and riders placed on one loaded graph.

    Graph and cell index are shared read-only; entities live until reset().
    Every dispatch outcome is also written to the recorder as an event-log entry.
    """

    def __init__(
        self,
        graph: RoadGraph,
        index: CellIndex,
        *,
        matching: MatchingModel | None = None,
        pool: PoolModel | None = None,
        frontier: Callable[[], Frontier] = HeapFrontier,
        hooks: DispatchHooks | None = None,
        recorder: Recorder | None = None,
        rng: RNGStreams | None = None,
        run_id: str = "local",
    ):
        self.graph, self.index = graph, index
        self.matching = matching or MatchingModel()
        self.pool_cfg = pool or PoolModel()
        self.frontier = frontier
        self.hooks = hooks or NoopHooks()
        self.recorder = recorder
        self.rng = rng or RNGStreams(0)
        self.run_id = run_id
        self.drivers: dict[str, Driver] = {}
        self.riders: dict[str, Rider] = {}
        self._placed = 0  # random-driver counter, survives reset for unique ids

    # --------------- Helpers -----------------------------

    def _record(self, cls, **fields):
        if self.recorder:
            self.recorder.emit(
                cls(run_id=self.run_id, seq=self.recorder.next_seq(), name=cls.__name__[:-3], **fields)
            )

    def _cell(self, node: NodeId):
        try:
            return self.index.cell_of(node)
        except KeyError:
            if node in self.graph:
                raise KeyError(f"node {node!r} has no coordinates, so no cell") from None
            raise KeyError(f"unknown node {node!r}") from None

    def _search_kw(self, cancel: CancelToken | None) -> dict:
        m = self.matching
        return dict(
            start_radius=m.start_radius,
            fallback=m.fallback,
            frontier=self.frontier,
            workers=m.workers,
            cancel=cancel,
            hooks=self.hooks,
        )

    # --------------- Placement -----------------------------

    def place_driver(self, driver_id: str, node: NodeId) -> Driver:
        if driver_id in self.drivers:
            raise ValueError(f"driver {driver_id!r} already placed")
        d = Driver(driver_id, node, self._cell(node))
        self.drivers[driver_id] = d
        self._record(DriversPlacedBiz, driver_ids=[driver_id], nodes=[node])
        return d

    def place_random_drivers(self, n: int, *, prefix: str = "driver-") -> list[Driver]:
        """Place `n` drivers on distinct, currently unoccupied nodes (seeded)."""
        occupied = {d.node for d in self.drivers.values()}
        free = [nid for nid in self.index.cells if nid not in occupied]
        if n > len(free):
            raise ValueError(f"cannot place {n} drivers on {len(free)} free nodes")
        picks = self.rng.stream("placement").choice(len(free), size=n, replace=False)
        placed = []
        for i in picks:
            self._placed += 1
            did = f"{prefix}{self._placed}"
            node = free[int(i)]
            d = Driver(did, node, self.index.cell_of(node))
            self.drivers[did] = d
            placed.append(d)
        self._record(
            DriversPlacedBiz, driver_ids=[d.id for d in placed], nodes=[d.node for d in placed]
        )
        return placed

    def remove_driver(self, driver_id: str) -> Driver:
        d = self.drivers.pop(driver_id)
        self._record(DriverRemovedBiz, driver_id=d.id, node=d.node)
        return d

    def place_rider(self, rider_id: str, pickup: NodeId) -> Rider:
        if rider_id in self.riders:
            raise ValueError(f"rider {rider_id!r} already placed")
        r = Rider(rider_id, pickup, self._cell(pickup))
        self.riders[rider_id] = r
        self._record(RiderPlacedBiz, rider_id=rider_id, pickup=pickup)
        return r

    def reset(self) -> None:
        counts = dict(drivers=len(self.drivers), riders=len(self.riders))
        self.drivers.clear()
        self.riders.clear()
        self._record(SessionResetBiz, **counts)

    # --------------- Dispatch -----------------------------

    def route(self, source: NodeId, target: NodeId) -> PathResult:
        return shortest_path(self.graph, source, target, frontier=self.frontier)

    def match(self, rider_id: str, *, cancel: CancelToken | None = None) -> Match | NoMatch:
        rider = self.riders[rider_id]
        out = match_driver(
            self.graph,
            self.index,
            rider,
            list(self.drivers.values()),
            self.matching.max_radius,
            **self._search_kw(cancel),
        )
        if isinstance(out, Match):
            self._record(
                DriverMatchedBiz,
                rider_id=rider_id,
                driver_id=out.driver.id,
                distance=out.distance,
                radius=out.search.radius,
                fallback_used=out.search.fallback_used,
                visited=len(out.path.visited),
            )
        else:
            self._record(NoMatchBiz, rider_id=rider_id, reason=out.reason)
        return out

    def pool(
        self,
        rider_ids: Sequence[str],
        destination: NodeId,
        *,
        cancel: CancelToken | None = None,
    ) -> Route | NoRoute:
        riders = [self.riders[rid] for rid in rider_ids]
        out = plan_shared_route(
            self.graph,
            self.index,
            riders,
            destination,
            list(self.drivers.values()),
            self.matching.max_radius,
            max_riders=self.pool_cfg.max_riders,
            **self._search_kw(cancel),
        )
        if isinstance(out, Route):
            self._record(
                PoolRoutedBiz,
                rider_ids=list(rider_ids),
                driver_id=out.driver.id,
                order=list(out.order),
                destination=destination,
                cost=out.cost,
                path=list(out.path),
            )
        else:
            self._record(
                NoPoolRouteBiz, rider_ids=list(rider_ids), destination=destination, reason=out.reason
            )
        return out
