from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from ..core.entity import Entity


class Renderer(Protocol):
    def clear(self) -> None: ...

    def draw_entity(self, entity: "Entity") -> None: ...

    def draw_winner(self, text: str) -> None: ...


class NullRenderer:
    def clear(self) -> None:
        pass

    def draw_entity(self, entity: "Entity") -> None:
        pass

    def draw_winner(self, text: str) -> None:
        pass


@dataclass(frozen=True, slots=True)
class DrawCall:
    entity_id: int
    type: str
    x: float
    y: float


@dataclass(slots=True)
class RecordingRenderer:
    """Keeps the draw calls of the most recent frame."""

    calls: List[DrawCall] = field(default_factory=list)
    banner: Optional[str] = None
    clears: int = 0

    def clear(self) -> None:
        self.calls.clear()
        self.banner = None
        self.clears += 1

    def draw_entity(self, entity: "Entity") -> None:
        self.calls.append(DrawCall(entity.id, entity.type.value, entity.position.x, entity.position.y))

    def draw_winner(self, text: str) -> None:
        self.banner = text
