# pool_dispatch/errors.py
"""Error taxonomy for graph loading and dispatch.

Raised: GraphValidationError, PoolRequestError, DispatchCancelled.
Reported as data inside NoMatch / NoRoute outcomes: UnreachableError,
NoCandidateError, InfeasiblePoolError.
"""


class DispatchError(Exception):
    pass


class GraphValidationError(DispatchError, ValueError):
    """Malformed graph input; the whole load is rejected."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        head = "; ".join(self.problems[:5])
        more = f" (+{len(self.problems) - 5} more)" if len(self.problems) > 5 else ""
        super().__init__(f"invalid graph data: {head}{more}")


class PoolRequestError(DispatchError, ValueError):
    """Malformed pooling request (e.g. a pickup on the destination)."""


class DispatchCancelled(DispatchError):
    """The caller abandoned the request between sub-computations."""


class UnreachableError(DispatchError):
    """No finite path between the endpoints."""


class NoCandidateError(DispatchError):
    """Radius search exhausted max_radius without finding any entity."""


class InfeasiblePoolError(DispatchError):
    """Every pooled permutation needs at least one unreachable segment."""
