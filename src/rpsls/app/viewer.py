"""Desktop viewer: draws the arena with pygame and runs one tick per frame."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pygame

from ..sim.core.clock import MonotonicClock
from ..sim.core.config import SimulationConfig
from ..sim.core.entity import Entity
from ..sim.core.rules import COLORS
from ..sim.core.world import SimulationState, World

logger = logging.getLogger(__name__)

FPS = 60
BG_COLOR = (26, 26, 46)
BANNER_HEIGHT = 80
TITLE = "RPSLS Arena"


class PygameRenderer:
    def __init__(self, surface: pygame.Surface, radius: float):
        self.surface = surface
        self.radius = radius
        self.glyph_font = pygame.font.SysFont("arial", int(radius * 1.4), bold=True)
        self.banner_font = pygame.font.SysFont("arial", 28, bold=True)

    def clear(self) -> None:
        self.surface.fill(BG_COLOR)

    def draw_entity(self, entity: Entity) -> None:
        center = (int(entity.position.x), int(entity.position.y))
        pygame.draw.circle(self.surface, COLORS[entity.type], center, int(self.radius))
        label = self.glyph_font.render(entity.type.value[:2].title(), True, BG_COLOR)
        self.surface.blit(label, label.get_rect(center=center))

    def draw_winner(self, text: str) -> None:
        width, height = self.surface.get_size()
        band = pygame.Surface((width, BANNER_HEIGHT), pygame.SRCALPHA)
        band.fill((0, 0, 0, 191))
        self.surface.blit(band, (0, height // 2 - BANNER_HEIGHT // 2))
        # SysFont rarely carries emoji glyphs.
        text = "".join(ch for ch in text if ch.isascii()).strip()
        label = self.banner_font.render(text, True, (255, 255, 255))
        self.surface.blit(label, label.get_rect(center=(width // 2, height // 2)))


def run_viewer(config: SimulationConfig) -> None:
    pygame.init()
    screen = pygame.display.set_mode((int(config.width), int(config.height)))
    clock = pygame.time.Clock()
    renderer = PygameRenderer(screen, config.radius)
    world = World(config, renderer=renderer, clock=MonotonicClock())
    seed = config.seed
    world.start(seed=seed)

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    seed += 1
                    world.start(seed=seed)
                elif event.key == pygame.K_r:
                    world.reset()

        if world.state is SimulationState.RUNNING:
            world.step()
            pygame.display.set_caption(f"{TITLE} | frame {world.frame_count} | {world.stats_text}")
        pygame.display.flip()
        clock.tick(FPS)

    pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch an RPSLS match in a pygame window")
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--speed", type=float, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    if args.seed is not None:
        config.seed = args.seed
    if args.speed is not None:
        config.speed = args.speed
    run_viewer(config)


if __name__ == "__main__":
    main()
