from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pygame.math import Vector2

from .rules import EntityType


@dataclass(slots=True)
class Entity:
    id: int
    type: EntityType
    position: Vector2
    velocity: Vector2
    # Milliseconds on the simulation clock; None until the first collision.
    last_collision: Optional[float] = None

    @property
    def speed(self) -> float:
        return self.velocity.length()
