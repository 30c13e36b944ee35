from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable, Mapping, Optional

from .rules import EntityType
from .world import SimulationState, World
from ..types.metrics import TickMetrics

logger = logging.getLogger(__name__)

TickCallback = Callable[[TickMetrics], Awaitable[None]]


class TickLoop:
    """Runs one world tick at a time on the event loop.

    The next tick is scheduled only after the previous one (and its
    ``on_tick`` callback) has finished. ``start``, ``reset`` and ``stop``
    cancel and await the pending tick before touching the world, so a stale
    tick never runs against freshly initialised state.
    """

    def __init__(
        self,
        world: World,
        frame_interval: float = 1.0 / 60.0,
        on_tick: Optional[TickCallback] = None,
    ):
        self.world = world
        self.frame_interval = max(0.0, frame_interval)
        self.on_tick = on_tick
        self.lock = asyncio.Lock()
        self.error: Exception | None = None
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(
        self,
        counts: Mapping[EntityType | str, int] | None = None,
        speed: float | None = None,
        seed: int | None = None,
    ) -> None:
        await self.stop()
        self.error = None
        async with self.lock:
            self.world.start(counts=counts, speed=speed, seed=seed)
        self._task = asyncio.create_task(self._run())

    async def reset(self) -> None:
        await self.stop()
        async with self.lock:
            self.world.reset()

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        try:
            await self._tick_until_done()
        except Exception as exc:
            self.error = exc
            logger.exception("Tick loop failed at frame %d", self.world.frame_count)
            async with self.lock:
                self.world.reset()

    async def _tick_until_done(self) -> None:
        while True:
            async with self.lock:
                if self.world.state is not SimulationState.RUNNING:
                    return
                metrics = self.world.step()
            if self.on_tick is not None:
                await self.on_tick(metrics)
            if metrics.ended:
                logger.debug("Tick loop finished at frame %d", metrics.frame)
                return
            await asyncio.sleep(self.frame_interval)
