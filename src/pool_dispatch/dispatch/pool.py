# dispatch/pool.py
"""
Shared-ride route selection: N pickups (N <= 3), one shared drop-off.

For every candidate driver (the closest driver to each rider, deduplicated)
and every pickup ordering, the route driver -> pickups -> destination is
costed from precomputed shortest-path segments. With two riders that is at
most 2 drivers x 2 orderings = 4 permutations. Exhaustive enumeration is only
reasonable for tiny N; larger groups need a proper combinatorial solver.
"""

from collections.abc import Callable, Mapping, Sequence
from itertools import permutations

from pool_dispatch.dispatch.hooks import DispatchHooks, NoopHooks
from pool_dispatch.dispatch.matcher import match_driver
from pool_dispatch.dispatch.outcomes import Match, NoMatch, NoRoute, PoolEvaluation, Route
from pool_dispatch.dispatch.parallel import CancelToken, fan_out
from pool_dispatch.domain.entities.driver import Driver
from pool_dispatch.domain.entities.geography import NodeId
from pool_dispatch.domain.entities.rider import Rider
from pool_dispatch.domain.graph import RoadGraph
from pool_dispatch.errors import DispatchCancelled, InfeasiblePoolError, PoolRequestError
from pool_dispatch.geo.candidates import FallbackPolicy
from pool_dispatch.geo.cells import CellIndex
from pool_dispatch.routing.dijkstra import PathResult, join_paths, shortest_path
from pool_dispatch.routing.frontier import Frontier, HeapFrontier

MAX_POOL_RIDERS = 3

Leg = tuple[NodeId, NodeId]
Plan = tuple[Driver, tuple[Rider, ...], list[Leg]]
Best = tuple[float, Driver, tuple[str, ...], list[PathResult]]


def _check_request(riders: Sequence[Rider], destination: NodeId, max_riders: int) -> None:
    cap = min(max_riders, MAX_POOL_RIDERS)
    if not 1 <= len(riders) <= cap:
        raise PoolRequestError(f"pool needs 1..{cap} riders, got {len(riders)}")
    ids = [r.id for r in riders]
    if len(set(ids)) != len(ids):
        raise PoolRequestError(f"duplicate rider ids in pool: {ids}")
    for r in riders:
        if r.pickup == destination:
            raise PoolRequestError(
                f"rider {r.id!r} pickup {r.pickup!r} is the shared destination"
            )


def _legs(driver: Driver, order: Sequence[Rider], destination: NodeId) -> list[Leg]:
    stops = [driver.node, *(r.pickup for r in order), destination]
    return list(zip(stops, stops[1:]))


def cost_plans(
    plans: Sequence[Plan],
    segments: Mapping[Leg, PathResult],
    *,
    hooks: DispatchHooks | None = None,
) -> tuple[list[PoolEvaluation], Best | None]:
    """
    Cost every (driver, pickup order, legs) plan from the segment table.

    A plan with any unreachable leg is reported as infeasible and never
    selected. The strict minimum wins, so ties go to the earlier plan.
    """
    hooks = hooks or NoopHooks()
    evaluations: list[PoolEvaluation] = []
    best = None
    for d, order, legs in plans:
        segs = [segments[leg] for leg in legs]
        feasible = all(s.reachable for s in segs)
        cost = sum(s.distance for s in segs)
        ev = PoolEvaluation(d.id, tuple(r.id for r in order), cost, feasible)
        evaluations.append(ev)
        hooks.pool_evaluated(driver_id=ev.driver_id, order=ev.order, cost=cost, feasible=feasible)
        if feasible and (best is None or cost < best[0]):
            best = (cost, d, ev.order, segs)
    return evaluations, best


def plan_shared_route(
    graph: RoadGraph,
    index: CellIndex,
    riders: Sequence[Rider],
    destination: NodeId,
    drivers: Sequence[Driver],
    max_radius: int,
    *,
    max_riders: int = MAX_POOL_RIDERS,
    start_radius: int = 1,
    fallback: FallbackPolicy = "none",
    frontier: Callable[[], Frontier] = HeapFrontier,
    workers: int = 1,
    cancel: CancelToken | None = None,
    hooks: DispatchHooks | None = None,
) -> Route | NoRoute:
    _check_request(riders, destination, max_riders)
    hooks = hooks or NoopHooks()
    rider_ids = tuple(r.id for r in riders)

    # 1) closest driver per rider
    matches: list[Match | NoMatch] = [
        match_driver(
            graph,
            index,
            r,
            drivers,
            max_radius,
            start_radius=start_radius,
            fallback=fallback,
            frontier=frontier,
            workers=workers,
            cancel=cancel,
            hooks=hooks,
        )
        for r in riders
    ]
    candidates: dict[str, Driver] = {}
    for m in matches:
        if isinstance(m, Match):
            candidates.setdefault(m.driver.id, m.driver)
    if not candidates:
        hooks.no_pool_route(rider_ids=rider_ids, reason="no_driver")
        return NoRoute("no_driver", matches[0].error)

    # 2) every segment any permutation needs, each computed once
    plans = [
        (d, order, _legs(d, order, destination))
        for d in candidates.values()
        for order in permutations(riders)
    ]
    segments: dict[Leg, PathResult] = {
        (m.path.source, m.path.target): m.path for m in matches if isinstance(m, Match)
    }
    todo = list(dict.fromkeys(leg for _, _, legs in plans for leg in legs if leg not in segments))
    try:
        computed = fan_out(
            lambda leg: shortest_path(graph, leg[0], leg[1], frontier=frontier),
            todo,
            workers=workers,
            cancel=cancel,
            stage="pool_segments",
        )
    except DispatchCancelled:
        hooks.cancelled(stage="pool_segments")
        raise
    segments.update(zip(todo, computed))

    # 3) cost each permutation
    evaluations, best = cost_plans(plans, segments, hooks=hooks)
    if best is None:
        hooks.no_pool_route(rider_ids=rider_ids, reason="infeasible")
        return NoRoute(
            "infeasible",
            InfeasiblePoolError(f"no feasible pooled route for riders {list(rider_ids)}"),
            tuple(evaluations),
        )

    cost, driver, order, segs = best
    hooks.pool_done(
        rider_ids=rider_ids,
        driver_id=driver.id,
        order=order,
        cost=cost,
        evaluated=len(evaluations),
    )
    return Route(driver, order, join_paths(segs), cost, tuple(segs), tuple(evaluations))


def optimize_pool(
    graph: RoadGraph,
    index: CellIndex,
    rider_a: Rider,
    rider_b: Rider,
    destination: NodeId,
    drivers: Sequence[Driver],
    max_radius: int,
    **kw,
) -> Route | NoRoute:
    """Two riders, one shared destination: cheapest of <= 4 driver/ordering permutations."""
    return plan_shared_route(graph, index, [rider_a, rider_b], destination, drivers, max_radius, **kw)
