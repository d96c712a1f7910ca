"""Entry point for ``python -m cityscape``.

Loads the YAML config, optionally restores a city from a JSON snapshot,
runs a number of ticks headless and writes the final state back out.
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
import time

from cityscape.simulation.config import SimulationConfig
from cityscape.simulation.engine import SimulationEngine

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

log = logging.getLogger("cityscape")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cityscape",
        description="Cityscape - headless city-building simulation",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "-n",
        "--ticks",
        type=int,
        default=10,
        help="Number of ticks to run (default: 10)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help=(
            "Seconds to wait between ticks; 0 runs flat out "
            "(default: tick_interval from the config)"
        ),
    )
    parser.add_argument(
        "--snapshot",
        type=pathlib.Path,
        help="JSON grid snapshot to load before the first tick",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=pathlib.Path,
        help="Write the final update and grid snapshot to this JSON file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-tick detail",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse CLI args, run the engine, report the result."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = SimulationConfig.from_yaml(args.config)
        engine = SimulationEngine(config=config)
        if args.snapshot is not None:
            with args.snapshot.open("r") as f:
                engine.load_snapshot(json.load(f))
    except (OSError, ValueError) as exc:
        log.error("could not start simulation: %s", exc)
        return 1

    log.info(
        "running %d ticks on a %dx%d grid (seed %d)",
        args.ticks,
        engine.grid.width,
        engine.grid.height,
        config.seed,
    )
    interval = config.tick_interval if args.interval is None else args.interval
    update = None
    for i in range(args.ticks):
        if i and interval > 0:
            time.sleep(interval)
        update = engine.step()
        log.info(
            "tick %d: %s, money=%d population=%d happiness=%.1f pollution=%.1f",
            engine.tick,
            engine.weather.kind.value,
            update.economics.money,
            update.economics.population,
            update.happiness,
            update.pollution,
        )

    if args.output is not None:
        payload = {
            "tick": engine.tick,
            "update": update.to_dict() if update else None,
            "statistics": engine.statistics(),
            "grid": engine.snapshot(),
        }
        try:
            with args.output.open("w") as f:
                json.dump(payload, f, indent=2)
        except OSError as exc:
            log.error("could not write %s: %s", args.output, exc)
            return 1
        log.info("wrote %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
