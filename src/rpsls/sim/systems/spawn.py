from __future__ import annotations

import math
from typing import List, Mapping

from pygame.math import Vector2

from ..core.entity import Entity
from ..core.rng import DeterministicRng
from ..core.rules import ENTITY_TYPES, EntityType, as_entity_type
from ..utils.math2d import _polar


def create_entity(
    entity_id: int,
    entity_type: EntityType | str,
    width: float,
    height: float,
    speed: float,
    rng: DeterministicRng,
    inset: float = 20.0,
) -> Entity:
    if not math.isfinite(speed) or speed < 0:
        raise ValueError(f"Speed must be a finite non-negative number, got {speed}")
    if width <= 2 * inset or height <= 2 * inset:
        raise ValueError(f"Arena {width}x{height} is too small for spawn inset {inset}")
    position = Vector2(
        rng.next_range(inset, width - inset),
        rng.next_range(inset, height - inset),
    )
    velocity = _polar(rng.next_angle(), speed)
    return Entity(id=entity_id, type=as_entity_type(entity_type), position=position, velocity=velocity)


def spawn_population(
    counts: Mapping[EntityType, int],
    width: float,
    height: float,
    speed: float,
    rng: DeterministicRng,
    inset: float = 20.0,
) -> List[Entity]:
    entities: List[Entity] = []
    for entity_type in ENTITY_TYPES:
        count = int(counts.get(entity_type, 0))
        if count < 0:
            raise ValueError(f"Initial count for {entity_type.value} must be non-negative, got {count}")
        for _ in range(count):
            entities.append(create_entity(len(entities), entity_type, width, height, speed, rng, inset))
    return entities
