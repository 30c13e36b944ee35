from __future__ import annotations

import logging
from enum import Enum
from time import perf_counter
from typing import Any, Dict, List, Mapping, Optional

from .clock import Clock, FrameClock
from .config import SimulationConfig
from .entity import Entity
from .rng import DeterministicRng
from .rules import ENTITY_TYPES, GLYPHS, EntityType, as_entity_type
from ..systems import collisions, metrics as metrics_system, motion, population, spawn
from ..types.metrics import TickMetrics
from ..types.render import NullRenderer, Renderer
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotSeries, SnapshotWorld

logger = logging.getLogger(__name__)


class SimulationState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


def winner_banner(winner: Optional[EntityType]) -> str:
    if winner is None:
        return "NO SURVIVORS"
    return f"{GLYPHS[winner]} {winner.value.upper()} WINS!"


class World:
    def __init__(
        self,
        config: SimulationConfig,
        renderer: Renderer | None = None,
        clock: Clock | None = None,
    ):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._clock: Clock = clock if clock is not None else FrameClock(config.frame_ms)
        self._renderer: Renderer = renderer if renderer is not None else NullRenderer()
        self._entities: List[Entity] = []
        self._state = SimulationState.IDLE
        self._game_over = False
        self._winner: Optional[EntityType] = None
        self._frame_count = 0
        self._counts: Dict[EntityType, int] = {entity_type: 0 for entity_type in ENTITY_TYPES}
        self._series = population.PopulationSeries()
        self._stats_text = ""
        self._metrics: TickMetrics | None = None

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def entities(self) -> List[Entity]:
        return self._entities

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def game_over(self) -> bool:
        return self._game_over

    @property
    def winner(self) -> Optional[EntityType]:
        return self._winner

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def counts(self) -> Dict[EntityType, int]:
        return dict(self._counts)

    @property
    def series(self) -> population.PopulationSeries:
        return self._series

    @property
    def stats_text(self) -> str:
        return self._stats_text

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def start(
        self,
        counts: Mapping[EntityType | str, int] | None = None,
        speed: float | None = None,
        seed: int | None = None,
    ) -> None:
        config = self._config
        if counts is None:
            initial = config.initial_counts.as_dict()
        else:
            initial = {as_entity_type(key): int(value) for key, value in counts.items()}
        speed = config.speed if speed is None else float(speed)
        rng = DeterministicRng(config.seed if seed is None else seed)
        # Spawn first; a rejected start leaves the current match untouched.
        entities = spawn.spawn_population(
            initial,
            config.width,
            config.height,
            speed,
            rng,
            inset=config.spawn_inset,
        )
        self._rng = rng
        self._clear_state()
        self._clock.reset()
        self._entities = entities
        self._counts = population.compute_counts(self._entities)
        self._stats_text = population.format_counts(self._counts)
        self._state = SimulationState.RUNNING
        logger.info(
            "Match started with %d entities (speed=%.2f, seed=%d): %s",
            len(self._entities),
            speed,
            self._rng.seed,
            self._stats_text,
        )

    def reset(self) -> None:
        self._clear_state()
        self._renderer.clear()
        self._state = SimulationState.IDLE
        logger.info("Simulation reset")

    def step(self) -> TickMetrics:
        if self._state is not SimulationState.RUNNING:
            raise RuntimeError(f"Cannot step a world in state {self._state.value!r}")
        start = perf_counter()
        config = self._config
        width = config.width
        height = config.height
        margin = config.edge_margin
        radius = config.radius
        cooldown = config.collision_cooldown_ms
        renderer = self._renderer

        renderer.clear()
        self._frame_count += 1
        self._clock.advance()
        now = self._clock.now_ms()

        pair_checks = 0
        collision_count = 0
        conversions = 0
        cooldown_skips = 0
        entities = self._entities
        total = len(entities)
        for i in range(total):
            entity = entities[i]
            motion.move(entity, width, height, margin)
            for j in range(i + 1, total):
                other = entities[j]
                pair_checks += 1
                if not collisions.is_colliding(entity, other, radius):
                    continue
                outcome = collisions.resolve_collision(entity, other, now, cooldown)
                if outcome is collisions.CollisionOutcome.COOLDOWN:
                    cooldown_skips += 1
                    continue
                collision_count += 1
                if outcome is collisions.CollisionOutcome.CONVERTED:
                    conversions += 1
            renderer.draw_entity(entity)

        sampled = self._update_stats()

        if self._game_over:
            self._state = SimulationState.ENDED
            renderer.draw_winner(winner_banner(self._winner))

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(
            self._frame_count,
            self._counts,
            (pair_checks, collision_count, conversions, cooldown_skips),
            sampled,
            self._winner,
            self._game_over,
            duration_ms,
        )
        return self._metrics

    def snapshot(self) -> Snapshot:
        config = self._config
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(
                self._frame_count, self._counts, (0, 0, 0, 0), False, self._winner, self._game_over, 0.0
            )
        return Snapshot(
            frame=self._frame_count,
            state=self._state.value,
            winner=None if self._winner is None else self._winner.value,
            stats=self._stats_text,
            metrics=metrics,
            entities=[self._entity_snapshot(entity) for entity in self._entities],
            world=SnapshotWorld(width=config.width, height=config.height, radius=config.radius),
            metadata=SnapshotMetadata(
                seed=self._rng.seed,
                frame_ms=config.frame_ms,
                cooldown_ms=config.collision_cooldown_ms,
                sample_interval=config.sample_interval,
                config_version=config.config_version,
            ),
            series=SnapshotSeries(labels=self._series.labels, datasets=self._series.datasets()),
        )

    def _update_stats(self) -> bool:
        counts = population.compute_counts(self._entities)
        self._counts = counts
        self._stats_text = population.format_counts(counts)

        sampled = population.should_sample(self._frame_count, self._config.sample_interval)
        if sampled:
            self._series.append(self._frame_count, counts)
            logger.debug("Frame %d: %s", self._frame_count, self._stats_text)

        if not self._game_over:
            survivor = population.sole_survivor(counts)
            if survivor is not None or not self._entities:
                self._winner = survivor
                self._game_over = True
                logger.info("Match ended at frame %d: %s", self._frame_count, winner_banner(survivor))
        return sampled

    def _clear_state(self) -> None:
        self._entities = []
        self._game_over = False
        self._winner = None
        self._frame_count = 0
        self._counts = {entity_type: 0 for entity_type in ENTITY_TYPES}
        self._series.clear()
        self._stats_text = ""
        self._metrics = None

    @staticmethod
    def _entity_snapshot(entity: Entity) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "type": entity.type.value,
            "glyph": GLYPHS[entity.type],
            "x": entity.position.x,
            "y": entity.position.y,
            "vx": entity.velocity.x,
            "vy": entity.velocity.y,
            "last_collision": entity.last_collision,
        }
