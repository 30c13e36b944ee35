from __future__ import annotations

from ..core.entity import Entity
from ..utils.math2d import _is_finite_xy


def move(entity: Entity, width: float, height: float, margin: float) -> None:
    position = entity.position
    velocity = entity.velocity
    x = position.x + velocity.x
    y = position.y + velocity.y
    if not _is_finite_xy(x, y):
        raise ValueError(f"Entity {entity.id} moved to a non-finite position ({x}, {y})")
    position.x = x
    position.y = y

    # Each axis bounces on its own; no clamping back inside the margin.
    if x <= margin or x >= width - margin:
        velocity.x = -velocity.x
    if y <= margin or y >= height - margin:
        velocity.y = -velocity.y
