from __future__ import annotations

from time import monotonic
from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> float: ...

    def advance(self) -> None: ...

    def reset(self) -> None: ...


class MonotonicClock:
    """Wall time in milliseconds since the clock was created or reset."""

    def __init__(self) -> None:
        self._origin = monotonic()

    def now_ms(self) -> float:
        return (monotonic() - self._origin) * 1000.0

    def advance(self) -> None:
        pass

    def reset(self) -> None:
        self._origin = monotonic()


class FrameClock:
    """Simulated time that moves a fixed amount per frame.

    Headless runs and tests use it so cooldowns depend only on the frame
    count, never on how long a tick took to compute.
    """

    def __init__(self, frame_ms: float = 1000.0 / 60.0) -> None:
        if frame_ms <= 0:
            raise ValueError("frame_ms must be positive")
        self._frame_ms = frame_ms
        self._frames = 0

    def now_ms(self) -> float:
        return self._frames * self._frame_ms

    def advance(self) -> None:
        self._frames += 1

    def reset(self) -> None:
        self._frames = 0
