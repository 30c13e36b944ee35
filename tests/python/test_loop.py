import asyncio

from pygame.math import Vector2

from rpsls.sim.core.config import SimulationConfig
from rpsls.sim.core.loop import TickLoop
from rpsls.sim.core.rules import EntityType
from rpsls.sim.core.world import SimulationState, World


def test_loop_runs_until_winner_and_stops_scheduling() -> None:
    world = World(SimulationConfig(width=400.0, height=300.0))
    frames: list[int] = []

    async def on_tick(metrics) -> None:
        frames.append(metrics.frame)

    loop = TickLoop(world, frame_interval=0.0, on_tick=on_tick)

    async def exercise() -> None:
        await loop.start(counts={EntityType.SCISSORS: 4})
        await loop.wait()
        assert not loop.running

    asyncio.run(exercise())
    assert frames == [1]
    assert world.state is SimulationState.ENDED
    assert world.winner is EntityType.SCISSORS


def test_reset_cancels_pending_tick_before_clearing() -> None:
    world = World(SimulationConfig(width=400.0, height=300.0))
    loop = TickLoop(world, frame_interval=10.0)

    async def exercise() -> None:
        await loop.start(counts={EntityType.ROCK: 1, EntityType.PAPER: 1}, speed=0.0)
        world.entities[0].position = Vector2(50.0, 50.0)
        world.entities[1].position = Vector2(300.0, 250.0)
        await asyncio.sleep(0.01)
        assert world.frame_count == 1
        assert loop.running

        await loop.reset()

        assert not loop.running
        assert world.state is SimulationState.IDLE
        await asyncio.sleep(0.01)
        assert world.frame_count == 0

    asyncio.run(exercise())


def test_restart_replaces_running_match() -> None:
    world = World(SimulationConfig(width=400.0, height=300.0))
    loop = TickLoop(world, frame_interval=10.0)

    async def exercise() -> None:
        await loop.start(counts={EntityType.ROCK: 1, EntityType.PAPER: 1}, speed=0.0)
        world.entities[0].position = Vector2(50.0, 50.0)
        world.entities[1].position = Vector2(300.0, 250.0)
        await asyncio.sleep(0.01)
        first_task = loop._task

        await loop.start(counts={EntityType.LIZARD: 2, EntityType.SPOCK: 1}, seed=5)

        assert first_task is not None and first_task.cancelled()
        assert world.frame_count == 0
        assert len(world.entities) == 3
        await loop.stop()

    asyncio.run(exercise())


def test_failing_tick_is_recorded_and_world_reset() -> None:
    world = World(SimulationConfig(width=400.0, height=300.0, radius=0.0))
    failure = RuntimeError("subscriber went away")

    async def on_tick(metrics) -> None:
        raise failure

    loop = TickLoop(world, frame_interval=0.0, on_tick=on_tick)

    async def exercise() -> None:
        await loop.start(counts={EntityType.ROCK: 1, EntityType.PAPER: 1}, speed=0.0)
        await loop.wait()
        assert loop.error is failure
        assert not loop.running
        assert world.state is SimulationState.IDLE
        assert world.frame_count == 0

        await loop.start(counts={EntityType.ROCK: 1, EntityType.PAPER: 1}, speed=0.0)
        assert loop.error is None
        await loop.stop()

    asyncio.run(exercise())
