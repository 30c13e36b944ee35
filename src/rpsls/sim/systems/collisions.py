from __future__ import annotations

from enum import Enum

from ..core.entity import Entity
from ..core.rules import beats
from ..utils.math2d import _distance_sq_xy


class CollisionOutcome(str, Enum):
    COOLDOWN = "cooldown"
    NEUTRAL = "neutral"
    CONVERTED = "converted"


def is_colliding(a: Entity, b: Entity, radius: float) -> bool:
    reach = radius * 2
    return _distance_sq_xy(a.position.x, a.position.y, b.position.x, b.position.y) < reach * reach


def resolve_collision(a: Entity, b: Entity, now: float, cooldown_ms: float) -> CollisionOutcome:
    """Apply the dominance rule to a touching pair.

    Only ``a``'s timestamp gates the cooldown. When the collision counts,
    both entities are stamped with ``now`` even if they share a type, and
    the loser takes the winner's type. Position and velocity never change.
    """
    last = a.last_collision
    if last is not None:
        if now < last:
            raise ValueError(f"Clock went backwards: now={now} is before last collision {last}")
        if now - last < cooldown_ms:
            return CollisionOutcome.COOLDOWN

    a.last_collision = now
    b.last_collision = now

    if a.type is b.type:
        return CollisionOutcome.NEUTRAL
    if beats(a.type, b.type):
        b.type = a.type
    elif beats(b.type, a.type):
        a.type = b.type
    return CollisionOutcome.CONVERTED
