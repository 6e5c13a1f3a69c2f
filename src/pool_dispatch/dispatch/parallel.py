# dispatch/parallel.py
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from pool_dispatch.errors import DispatchCancelled

T = TypeVar("T")
R = TypeVar("R")


class CancelToken:
    """Cooperative cancellation flag checked between independent sub-computations."""

    def __init__(self):
        self._ev = threading.Event()

    def cancel(self) -> None:
        self._ev.set()

    @property
    def cancelled(self) -> bool:
        return self._ev.is_set()

    def check(self, stage: str = "") -> None:
        if self._ev.is_set():
            raise DispatchCancelled(f"cancelled during {stage}" if stage else "cancelled")


def fan_out(
    fn: Callable[[T], R],
    items: Sequence[T],
    *,
    workers: int = 1,
    cancel: CancelToken | None = None,
    stage: str = "",
) -> list[R]:
    """
    Run `fn` over independent `items`, results in input order.

    workers == 1 runs inline. The cancel token is checked before each item is
    started and before each result is collected; on cancel, futures that have
    not started are dropped and DispatchCancelled is raised.
    """
    if workers <= 1 or len(items) <= 1:
        out = []
        for it in items:
            if cancel:
                cancel.check(stage)
            out.append(fn(it))
        return out

    with ThreadPoolExecutor(max_workers=min(workers, len(items))) as executor:
        futures = []
        try:
            for it in items:
                if cancel:
                    cancel.check(stage)
                futures.append(executor.submit(fn, it))
            results = []
            for f in futures:
                if cancel:
                    cancel.check(stage)
                results.append(f.result())
            return results
        except DispatchCancelled:
            for f in futures:
                f.cancel()
            raise
