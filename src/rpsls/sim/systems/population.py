from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..core.entity import Entity
from ..core.rules import ENTITY_TYPES, GLYPHS, EntityType


@dataclass(frozen=True, slots=True)
class PopulationSample:
    frame: int
    counts: Dict[EntityType, int]


@dataclass(slots=True)
class PopulationSeries:
    """Time series of sampled counts, shaped for a line chart."""

    samples: List[PopulationSample] = field(default_factory=list)

    def append(self, frame: int, counts: Dict[EntityType, int]) -> PopulationSample:
        sample = PopulationSample(frame=frame, counts=dict(counts))
        self.samples.append(sample)
        return sample

    def clear(self) -> None:
        self.samples.clear()

    @property
    def labels(self) -> List[int]:
        return [sample.frame for sample in self.samples]

    def datasets(self) -> Dict[str, List[int]]:
        return {
            entity_type.value: [sample.counts.get(entity_type, 0) for sample in self.samples]
            for entity_type in ENTITY_TYPES
        }

    def __len__(self) -> int:
        return len(self.samples)


def compute_counts(entities: Iterable[Entity]) -> Dict[EntityType, int]:
    counts = {entity_type: 0 for entity_type in ENTITY_TYPES}
    for entity in entities:
        counts[entity.type] += 1
    return counts


def sole_survivor(counts: Dict[EntityType, int]) -> Optional[EntityType]:
    alive = [entity_type for entity_type, count in counts.items() if count > 0]
    if len(alive) == 1:
        return alive[0]
    return None


def format_counts(counts: Dict[EntityType, int]) -> str:
    return " | ".join(f"{GLYPHS[entity_type]} {counts.get(entity_type, 0)}" for entity_type in ENTITY_TYPES)


def should_sample(frame: int, interval: int) -> bool:
    return interval > 0 and frame % interval == 0
