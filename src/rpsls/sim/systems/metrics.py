from __future__ import annotations

from typing import Dict, Optional, Tuple

from ..core.rules import EntityType
from ..types.metrics import TickMetrics


def create_metrics(
    frame: int,
    counts: Dict[EntityType, int],
    collision_stats: Tuple[int, int, int, int],
    sampled: bool,
    winner: Optional[EntityType],
    ended: bool,
    duration_ms: float,
) -> TickMetrics:
    pair_checks, collisions, conversions, cooldown_skips = collision_stats
    return TickMetrics(
        frame=frame,
        population=sum(counts.values()),
        counts={entity_type.value: count for entity_type, count in counts.items()},
        pair_checks=pair_checks,
        collisions=collisions,
        conversions=conversions,
        cooldown_skips=cooldown_skips,
        sampled=sampled,
        ended=ended,
        winner=None if winner is None else winner.value,
        tick_duration_ms=duration_ms,
    )
