from __future__ import annotations

import math

from pygame.math import Vector2


def _is_finite_xy(x: float, y: float) -> bool:
    return math.isfinite(x) and math.isfinite(y)


def _distance_sq_xy(ax: float, ay: float, bx: float, by: float) -> float:
    dx = ax - bx
    dy = ay - by
    return dx * dx + dy * dy


def _polar(angle: float, magnitude: float) -> Vector2:
    return Vector2(math.cos(angle) * magnitude, math.sin(angle) * magnitude)
