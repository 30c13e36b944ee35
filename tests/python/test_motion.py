from __future__ import annotations

import math

import pytest
from pygame.math import Vector2
from pytest import approx

from rpsls.sim.core.entity import Entity
from rpsls.sim.core.rules import EntityType
from rpsls.sim.systems.motion import move


def _entity(x: float, y: float, dx: float, dy: float) -> Entity:
    return Entity(id=0, type=EntityType.ROCK, position=Vector2(x, y), velocity=Vector2(dx, dy))


def test_left_edge_inverts_dx():
    entity = _entity(5.0, 100.0, -3.0, 0.0)
    move(entity, 400.0, 300.0, 10.0)
    assert entity.position.x == approx(2.0)
    assert entity.velocity.x == approx(3.0)


def test_interior_motion_keeps_velocity():
    entity = _entity(200.0, 150.0, 1.5, -2.0)
    move(entity, 400.0, 300.0, 10.0)
    assert entity.position == Vector2(201.5, 148.0)
    assert entity.velocity == Vector2(1.5, -2.0)


def test_right_and_bottom_edges_bounce_on_same_step():
    entity = _entity(388.0, 288.0, 3.0, 3.0)
    move(entity, 400.0, 300.0, 10.0)
    assert entity.velocity == Vector2(-3.0, -3.0)
    assert entity.position == Vector2(391.0, 291.0)


def test_bounce_preserves_speed():
    entity = _entity(11.0, 11.0, -2.0, -1.0)
    speed = entity.velocity.length()
    move(entity, 400.0, 300.0, 10.0)
    assert entity.velocity.length() == approx(speed)


def test_margin_boundary_is_inclusive():
    entity = _entity(12.0, 150.0, -2.0, 0.0)
    move(entity, 400.0, 300.0, 10.0)
    assert entity.position.x == approx(10.0)
    assert entity.velocity.x == approx(2.0)


def test_non_finite_position_raises():
    entity = _entity(100.0, 100.0, math.inf, 0.0)
    with pytest.raises(ValueError):
        move(entity, 400.0, 300.0, 10.0)
