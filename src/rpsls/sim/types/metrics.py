from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(slots=True)
class TickMetrics:
    frame: int
    population: int
    counts: Dict[str, int] = field(default_factory=dict)
    pair_checks: int = 0
    collisions: int = 0
    conversions: int = 0
    cooldown_skips: int = 0
    sampled: bool = False
    ended: bool = False
    winner: str | None = None
    tick_duration_ms: float = 0.0
