# main.py
import argparse
import json
import sys
from pathlib import Path

from pool_dispatch.app.build import build
from pool_dispatch.config.models import EngineModel
from pool_dispatch.dispatch.outcomes import Match, Route
from pool_dispatch.io.dispatch_logging import DispatchLogging, json_logger
from pool_dispatch.io.recorder import JsonlSink, Recorder


def _stderr_hooks(model: EngineModel) -> DispatchLogging:
    # stdout carries only the result document
    logger = json_logger("pool_dispatch.cli", model.log.level, stream=sys.stderr)
    logger.propagate = False
    return DispatchLogging(run_id=model.run_id, level=model.log.level, debug=model.log.debug, logger=logger)


def run(config_path: str, *, drivers: int, riders: list[str], destination: str | None) -> dict:
    model = EngineModel.model_validate_json(Path(config_path).read_text(encoding="utf-8"))
    app = build(model, hooks=_stderr_hooks(model), recorder=Recorder(JsonlSink(sys.stderr)))
    s = app.session

    s.place_random_drivers(drivers)
    for i, node in enumerate(riders):
        s.place_rider(f"rider-{i + 1}", node)
    ids = list(s.riders)

    if destination is None:
        out = s.match(ids[0])
        if isinstance(out, Match):
            return {
                "driver": out.driver.id,
                "distance": out.distance,
                "path": list(out.path.path),
                "visited": len(out.path.visited),
            }
        return {"error": out.reason}

    out = s.pool(ids, destination)
    if isinstance(out, Route):
        return {
            "driver": out.driver.id,
            "order": list(out.order),
            "cost": out.cost,
            "path": list(out.path),
        }
    return {"error": out.reason}


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Match riders to drivers on a road graph.")
    p.add_argument("config", help="engine config (JSON)")
    p.add_argument("--drivers", type=int, default=10, help="random drivers to place")
    p.add_argument("--rider", action="append", required=True, help="pickup node id (repeatable)")
    p.add_argument("--destination", help="shared destination node; enables pooling")
    args = p.parse_args(argv)

    result = run(args.config, drivers=args.drivers, riders=args.rider, destination=args.destination)
    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0 if "error" not in result else 1


if __name__ == "__main__":
    sys.exit(main())
