# dispatch/matcher.py
from collections.abc import Callable, Sequence

from pool_dispatch.dispatch.hooks import DispatchHooks, NoopHooks
from pool_dispatch.dispatch.outcomes import Match, NoMatch
from pool_dispatch.dispatch.parallel import CancelToken, fan_out
from pool_dispatch.domain.entities.driver import Driver
from pool_dispatch.domain.entities.rider import Rider
from pool_dispatch.domain.graph import RoadGraph
from pool_dispatch.errors import DispatchCancelled, NoCandidateError, UnreachableError
from pool_dispatch.geo.candidates import FallbackPolicy, find_candidates
from pool_dispatch.geo.cells import CellIndex
from pool_dispatch.routing.dijkstra import shortest_path
from pool_dispatch.routing.frontier import Frontier, HeapFrontier


def match_driver(
    graph: RoadGraph,
    index: CellIndex,
    rider: Rider,
    drivers: Sequence[Driver],
    max_radius: int,
    *,
    start_radius: int = 1,
    fallback: FallbackPolicy = "none",
    frontier: Callable[[], Frontier] = HeapFrontier,
    workers: int = 1,
    cancel: CancelToken | None = None,
    hooks: DispatchHooks | None = None,
) -> Match | NoMatch:
    """
    Closest driver to `rider` by road distance among the cell-index shortlist.

    Ties go to the driver found first in the shortlist. Returns NoMatch when the
    shortlist is empty or every shortlisted driver is unreachable.
    """
    hooks = hooks or NoopHooks()
    ref = rider.cell if rider.cell is not None else index.cell_of(rider.pickup)
    search = find_candidates(
        index, ref, drivers, max_radius, start_radius=start_radius, fallback=fallback, hooks=hooks
    )
    if not search:
        hooks.no_match(rider_id=rider.id, reason="no_candidates", radius=search.radius)
        return NoMatch(
            "no_candidates",
            NoCandidateError(f"no driver within {max_radius} cells of rider {rider.id!r}"),
            search,
        )

    try:
        paths = fan_out(
            lambda d: shortest_path(graph, d.node, rider.pickup, frontier=frontier),
            search.candidates,
            workers=workers,
            cancel=cancel,
            stage="match",
        )
    except DispatchCancelled:
        hooks.cancelled(stage="match")
        raise

    best = None
    for d, p in zip(search.candidates, paths):
        if p.reachable and (best is None or p.distance < best[1].distance):
            best = (d, p)

    if best is None:
        hooks.no_match(rider_id=rider.id, reason="unreachable", radius=search.radius)
        return NoMatch(
            "unreachable",
            UnreachableError(f"no shortlisted driver can reach rider {rider.id!r}"),
            search,
        )

    driver, path = best
    hooks.match_done(
        rider_id=rider.id,
        driver_id=driver.id,
        distance=path.distance,
        radius=search.radius,
        candidates=len(search.candidates),
    )
    return Match(driver, path, search)
