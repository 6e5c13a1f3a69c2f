# geo/candidates.py
import logging
from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from typing import Literal, TypeVar

from pool_dispatch.dispatch.hooks import DispatchHooks, NoopHooks
from pool_dispatch.geo.cells import CellIndex

log = logging.getLogger(__name__)

FallbackPolicy = Literal["none", "entire_pool"]

E = TypeVar("E")  # anything with a `.cell` attribute (Driver, Rider)


@dataclass(frozen=True)
class CandidateSearch:
    candidates: tuple
    radius: int  # last radius searched
    fallback_used: bool = False

    def __bool__(self) -> bool:
        return bool(self.candidates)


def in_ring(entity, ring: frozenset) -> bool:
    return entity.cell is not None and entity.cell in ring


def find_candidates(
    index: CellIndex,
    reference_cell: Hashable,
    pool: Sequence[E],
    max_radius: int,
    *,
    start_radius: int = 1,
    fallback: FallbackPolicy = "none",
    hooks: DispatchHooks | None = None,
) -> CandidateSearch:
    """
    Expanding-disk search around `reference_cell`.

    Grows the radius from `start_radius` until the disk holds at least one pool
    entity or `max_radius` is passed. Candidates keep pool order. Entities
    outside the returned radius's disk are only returned when
    fallback="entire_pool" fires, and that decision is always logged.
    """
    hooks = hooks or NoopHooks()
    if start_radius < 0:
        raise ValueError(f"start_radius must be >= 0, got {start_radius}")

    radius = start_radius
    while radius <= max_radius:
        ring = index.ring(reference_cell, radius)
        found = tuple(e for e in pool if in_ring(e, ring))
        hooks.search_ring(
            reference_cell=reference_cell, radius=radius, ring_size=len(ring), found=len(found)
        )
        if found:
            return CandidateSearch(found, radius)
        radius += 1

    last = max(start_radius, max_radius)
    if fallback == "entire_pool" and pool:
        log.warning(
            "candidate search exhausted max_radius=%d around %s; falling back to all %d entities",
            max_radius,
            reference_cell,
            len(pool),
        )
        hooks.search_fallback(reference_cell=reference_cell, max_radius=max_radius, pool_size=len(pool))
        return CandidateSearch(tuple(pool), last, fallback_used=True)
    return CandidateSearch((), last)
