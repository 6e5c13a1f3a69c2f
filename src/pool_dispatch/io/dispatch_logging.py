# io/dispatch_logging.py
import json
import logging
import math
import sys

from pool_dispatch.dispatch.hooks import NoopHooks


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        return json.dumps(payload, default=str)


def json_logger(name="pool_dispatch", level="INFO", stream=None):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(stream or sys.stdout)
        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
    logger.setLevel(level)  # latest config wins
    return logger


def _num(x: float) -> float | None:
    # json has no Infinity
    return None if x is None or math.isinf(x) else x


class DispatchLogging(NoopHooks):
    """
    Structured JSON logs for candidate search, matching and pooling.
    Per-ring and per-permutation records are DEBUG and only emitted with debug=True.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.debug = run_id, debug
        self.log = logger or json_logger(level=level)

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id}
        self.log.log(getattr(logging, level), msg, extra={"extra": {**payload, **extra}})

    # ------------- candidate search --------------------------

    def search_ring(self, *, reference_cell, radius, ring_size, found):
        if self.debug:
            self._emit(
                "DEBUG", "search_ring", cell=str(reference_cell), radius=radius,
                ring_size=ring_size, found=found,
            )

    def search_fallback(self, *, reference_cell, max_radius, pool_size):
        self._emit(
            "WARNING", "search_fallback", cell=str(reference_cell), max_radius=max_radius,
            pool_size=pool_size,
        )

    # ------------- matching --------------------------

    def match_done(self, *, rider_id, driver_id, distance, radius, candidates):
        self._emit(
            "INFO", "match_done", rider_id=rider_id, driver_id=driver_id,
            distance=_num(distance), radius=radius, candidates=candidates,
        )

    def no_match(self, *, rider_id, reason, radius):
        self._emit("INFO", "no_match", rider_id=rider_id, reason=reason, radius=radius)

    # ------------- pooling --------------------------

    def pool_evaluated(self, *, driver_id, order, cost, feasible):
        if self.debug:
            self._emit(
                "DEBUG", "pool_evaluated", driver_id=driver_id, order=list(order),
                cost=_num(cost), feasible=feasible,
            )

    def pool_done(self, *, rider_ids, driver_id, order, cost, evaluated):
        self._emit(
            "INFO", "pool_done", rider_ids=list(rider_ids), driver_id=driver_id,
            order=list(order), cost=_num(cost), evaluated=evaluated,
        )

    def no_pool_route(self, *, rider_ids, reason):
        self._emit("INFO", "no_pool_route", rider_ids=list(rider_ids), reason=reason)

    def cancelled(self, *, stage):
        self._emit("WARNING", "cancelled", stage=stage)
