# dispatch/hooks.py
from typing import Protocol


class DispatchHooks(Protocol):
    def search_ring(self, *, reference_cell, radius, ring_size, found): ...
    def search_fallback(self, *, reference_cell, max_radius, pool_size): ...
    def match_done(self, *, rider_id, driver_id, distance, radius, candidates): ...
    def no_match(self, *, rider_id, reason, radius): ...
    def pool_evaluated(self, *, driver_id, order, cost, feasible): ...
    def pool_done(self, *, rider_ids, driver_id, order, cost, evaluated): ...
    def no_pool_route(self, *, rider_ids, reason): ...
    def cancelled(self, *, stage): ...


class NoopHooks:
    def search_ring(self, **_):
        pass

    def search_fallback(self, **_):
        pass

    def match_done(self, **_):
        pass

    def no_match(self, **_):
        pass

    def pool_evaluated(self, **_):
        pass

    def pool_done(self, **_):
        pass

    def no_pool_route(self, **_):
        pass

    def cancelled(self, **_):
        pass
