# pool_dispatch/app/build.py
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pool_dispatch.app.session import DispatchSession
from pool_dispatch.config.models import EngineModel
from pool_dispatch.dispatch.hooks import DispatchHooks, NoopHooks
from pool_dispatch.domain.graph import RoadGraph
from pool_dispatch.geo.cells import CellGrid, CellIndex, build_cell_index
from pool_dispatch.io.dispatch_logging import DispatchLogging  # JSON logs
from pool_dispatch.io.recorder import JsonlSink, Recorder
from pool_dispatch.runtime.registries import make_frontier, make_grid, resolve_graph
from pool_dispatch.runtime.rng import RNGStreams


@dataclass
class App:
    config: EngineModel
    graph: RoadGraph
    index: CellIndex
    session: DispatchSession
    hooks: DispatchHooks
    recorder: Recorder


def build(
    cfg: EngineModel | Mapping,
    *,
    graphs: Mapping[str, RoadGraph] | None = None,
    graph_data: Mapping[str, Any] | None = None,
    grid: CellGrid | None = None,
    use_logging: bool = True,
    hooks: DispatchHooks | None = None,
    recorder: Recorder | None = None,
) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, EngineModel) else EngineModel.model_validate(cfg)

    # 1) Graph; validation errors surface here, before any matching
    graph = resolve_graph(model.graph, deps={"graphs": graphs or {}, "graph_data": graph_data})

    # 2) Cell index, built once and shared read-only
    grid = grid or make_grid(model.grid)
    index = build_cell_index(graph, grid)

    # 3) Hooks & event log
    recorder = recorder or Recorder(JsonlSink())
    hooks = hooks or (
        DispatchLogging(run_id=model.run_id, level=model.log.level, debug=model.log.debug)
        if use_logging
        else NoopHooks()
    )

    # 4) Session
    session = DispatchSession(
        graph,
        index,
        matching=model.matching,
        pool=model.pool,
        frontier=make_frontier(model.solver.frontier),
        hooks=hooks,
        recorder=recorder,
        rng=RNGStreams(model.seed, scenario=model.name),
        run_id=model.run_id,
    )
    return App(model, graph, index, session, hooks, recorder)
