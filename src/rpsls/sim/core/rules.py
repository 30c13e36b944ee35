from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Mapping, Tuple


class EntityType(str, Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"
    LIZARD = "lizard"
    SPOCK = "spock"


ENTITY_TYPES: Tuple[EntityType, ...] = tuple(EntityType)

RULES: Dict[EntityType, FrozenSet[EntityType]] = {
    EntityType.ROCK: frozenset({EntityType.SCISSORS, EntityType.LIZARD}),
    EntityType.PAPER: frozenset({EntityType.ROCK, EntityType.SPOCK}),
    EntityType.SCISSORS: frozenset({EntityType.PAPER, EntityType.LIZARD}),
    EntityType.LIZARD: frozenset({EntityType.SPOCK, EntityType.PAPER}),
    EntityType.SPOCK: frozenset({EntityType.SCISSORS, EntityType.ROCK}),
}

GLYPHS: Dict[EntityType, str] = {
    EntityType.ROCK: "\U0001faa8",
    EntityType.PAPER: "\U0001f4c4",
    EntityType.SCISSORS: "✂️",
    EntityType.LIZARD: "\U0001f98e",
    EntityType.SPOCK: "\U0001f596",
}

COLORS: Dict[EntityType, Tuple[int, int, int]] = {
    EntityType.ROCK: (140, 140, 150),
    EntityType.PAPER: (235, 235, 220),
    EntityType.SCISSORS: (230, 80, 80),
    EntityType.LIZARD: (90, 200, 110),
    EntityType.SPOCK: (90, 150, 240),
}


def as_entity_type(value: EntityType | str) -> EntityType:
    if isinstance(value, EntityType):
        return value
    try:
        return EntityType(value)
    except ValueError:
        raise ValueError(f"Unknown entity type: {value!r}") from None


def beats(a: EntityType | str, b: EntityType | str) -> bool:
    """Return True when ``a`` defeats ``b``."""
    return as_entity_type(b) in RULES[as_entity_type(a)]


def validate_rules(rules: Mapping[EntityType, FrozenSet[EntityType]]) -> None:
    """Check that ``rules`` forms a tournament over every entity type.

    Each type must beat exactly two others, never itself, and for every
    pair of distinct types exactly one direction must hold.
    """
    if set(rules) != set(ENTITY_TYPES):
        raise ValueError("Rules must define every entity type")
    for winner, losers in rules.items():
        if winner in losers:
            raise ValueError(f"{winner.value} cannot beat itself")
        if len(losers) != 2:
            raise ValueError(f"{winner.value} must beat exactly two types, got {len(losers)}")
    for index, a in enumerate(ENTITY_TYPES):
        for b in ENTITY_TYPES[index + 1 :]:
            if (b in rules[a]) == (a in rules[b]):
                raise ValueError(f"Exactly one of {a.value}/{b.value} must win")


validate_rules(RULES)
