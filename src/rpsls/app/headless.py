from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Dict, Optional

from ..sim.core.clock import FrameClock
from ..sim.core.config import SimulationConfig
from ..sim.core.rules import ENTITY_TYPES, EntityType, as_entity_type
from ..sim.core.world import SimulationState, World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "frame",
    "population",
    *[entity_type.value for entity_type in ENTITY_TYPES],
    "pair_checks",
    "collisions",
    "conversions",
    "cooldown_skips",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.frame,
        metrics.population,
        *[metrics.counts.get(entity_type.value, 0) for entity_type in ENTITY_TYPES],
        metrics.pair_checks,
        metrics.collisions,
        metrics.conversions,
        metrics.cooldown_skips,
        f"{tick_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def parse_counts(text: str) -> Dict[EntityType, int]:
    """Parse ``rock=5,paper=3`` into a count per type (missing types are 0)."""
    counts = {entity_type: 0 for entity_type in ENTITY_TYPES}
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Expected name=count, got {item!r}")
        count = int(value)
        if count < 0:
            raise ValueError(f"Count for {name.strip()} must be non-negative")
        counts[as_entity_type(name.strip().lower())] = count
    return counts


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    counts: Optional[Dict[EntityType, int]] = None,
    speed: Optional[float] = None,
    config: Optional[SimulationConfig] = None,
) -> World:
    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config.seed = seed
    world = World(config, clock=FrameClock(config.frame_ms))
    world.start(counts=counts, speed=speed)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    conversions_series: list[float] = []
    try:
        for _ in range(steps):
            metrics = world.step()
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            conversions_series.append(float(metrics.conversions))
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
            if world.state is SimulationState.ENDED:
                break
    finally:
        if csv_file:
            csv_file.close()

    if world.state is SimulationState.ENDED:
        logger.info("Finished at frame %d, winner: %s", world.frame_count, world.winner)
    else:
        logger.info("Stopped after %d frames without a winner: %s", world.frame_count, world.stats_text)

    if summary_path:
        series = world.series
        summary = {
            "steps": steps,
            "frames": world.frame_count,
            "seed": config.seed,
            "state": world.state.value,
            "winner": None if world.winner is None else world.winner.value,
            "final_counts": {entity_type.value: count for entity_type, count in world.counts.items()},
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "conversions": _summary_stats(conversions_series),
            "series": {"labels": series.labels, "datasets": series.datasets()},
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless rock-paper-scissors-lizard-spock arena")
    parser.add_argument("--steps", type=int, default=20000, help="Maximum frames to simulate")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--speed", type=float, default=None, help="Entity speed in pixels per frame")
    parser.add_argument("--counts", type=str, default=None, help="Initial counts, e.g. rock=5,paper=5,spock=2")
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-frame metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write the outcome and sampled population series.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        counts=parse_counts(args.counts) if args.counts else None,
        speed=args.speed,
        config=config,
    )


if __name__ == "__main__":
    main()
