from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    frame: int
    state: str
    winner: Optional[str]
    stats: str
    metrics: TickMetrics
    entities: List[Dict[str, Any]]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"
    series: "SnapshotSeries"


@dataclass(slots=True)
class SnapshotWorld:
    width: float
    height: float
    radius: float


@dataclass(slots=True)
class SnapshotMetadata:
    seed: int
    frame_ms: float
    cooldown_ms: float
    sample_interval: int
    config_version: str


@dataclass(slots=True)
class SnapshotSeries:
    labels: List[int]
    datasets: Dict[str, List[int]]
