#!/usr/bin/env python3
"""
viewer.py

Pygame window around a World. Reads the world only through `snapshot()`.

Controls:
  SPACE     pause / resume (resets the registry scroll)
  UP/DOWN   scroll the entity registry while paused
  ESC       quit

Run:
  python -m valkarai_zombies.viewer --seed 3
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pygame

# Support both direct script execution and module execution.
if __package__:
    from .config import TERRAIN_COLORS, Params, Terrain
    from .terrain import terrain_rgb
    from .world import AgentView, World, WorldSnapshot
else:
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)
    from valkarai_zombies.config import TERRAIN_COLORS, Params, Terrain
    from valkarai_zombies.terrain import terrain_rgb
    from valkarai_zombies.world import AgentView, World, WorldSnapshot

# --- UI Constants ---
WIDTH, HEIGHT = 800, 800
HEADER_HEIGHT = 44
FPS = 60
ITEMS_PER_PAGE = 20

# Colors
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
GRAY = (130, 130, 130)
RED = (230, 41, 55)
ORANGE = (255, 161, 0)
PURPLE = (200, 122, 255)
YELLOW = (253, 249, 0)
GREEN = (0, 228, 48)
DARKGREEN = (0, 117, 44)
OVERLAY = (0, 0, 0, 217)


def terrain_color(kind: Terrain) -> Tuple[int, int, int]:
    return TERRAIN_COLORS[Terrain(kind)]


def agent_color(agent: AgentView, threshold: float) -> Tuple[int, int, int]:
    if agent.is_predator:
        return BLACK
    if agent.ready_to_mate(threshold):
        return ORANGE
    return RED


def agent_radius(agent: AgentView, cell_w: float) -> float:
    return max(1.0, (agent.vision_gene / 15.0) * cell_w * 0.7)


def registry_rows(snap: WorldSnapshot, page: int, per_page: int = ITEMS_PER_PAGE) -> List[Tuple[str, ...]]:
    """Rows of the paused entity table: (#, type, speed, vision, energy%)."""
    start = page * per_page
    rows = []
    for n, a in enumerate(snap.agents[start:start + per_page], start=start + 1):
        kind = "ZOMBIE" if a.is_predator else "VALKARAI"
        energy = min(max(a.energy, 0.0), 100.0)
        rows.append((f"{n:03d}", kind, f"{a.speed_gene:.2f}", f"{a.vision_gene:.1f}", f"{energy:.0f}%"))
    return rows


@dataclass
class ViewerState:
    world: World
    paused: bool = False
    scroll: int = 0

    def toggle_pause(self) -> None:
        self.paused = not self.paused
        self.scroll = 0

    def scroll_by(self, delta: int) -> None:
        if not self.paused:
            return
        pages = max(1, -(-len(self.world.agents) // ITEMS_PER_PAGE))
        self.scroll = min(max(self.scroll + delta, 0), pages - 1)

    def advance(self) -> None:
        if not self.paused:
            self.world.step()


# ============================================================
# DRAWING
# ============================================================

def terrain_surface(snap: WorldSnapshot) -> pygame.Surface:
    rgb = (terrain_rgb(snap.terrain, snap.food) * 255.0).astype(np.uint8)
    # surfarray wants [x, y, 3]
    surf = pygame.surfarray.make_surface(np.ascontiguousarray(rgb.transpose(1, 0, 2)))
    return pygame.transform.scale(surf, (WIDTH, HEIGHT))


def draw_world(screen, snap: WorldSnapshot, threshold: float) -> None:
    cell_w = WIDTH / snap.grid_size
    cell_h = HEIGHT / snap.grid_size
    screen.blit(terrain_surface(snap), (0, HEADER_HEIGHT))
    for agent in snap.agents:
        pos = (int(agent.x * cell_w), HEADER_HEIGHT + int(agent.y * cell_h))
        pygame.draw.circle(screen, agent_color(agent, threshold), pos, int(agent_radius(agent, cell_w)))


def draw_text(screen, text, pos, font, color=WHITE):
    surf = font.render(text, True, color)
    screen.blit(surf, pos)


def draw_registry(screen, snap: WorldSnapshot, page: int, fonts) -> None:
    big, mid, small = fonts
    panel = pygame.Surface((WIDTH - 100, HEIGHT - 60), pygame.SRCALPHA)
    panel.fill(OVERLAY)
    screen.blit(panel, (50, HEADER_HEIGHT + 20))

    draw_text(screen, "ENTITY REGISTRY (PAUSED)", (70, HEADER_HEIGHT + 40), big, YELLOW)
    draw_text(screen, "Use UP/DOWN arrows to scroll", (70, HEADER_HEIGHT + 80), small, GRAY)
    top = HEADER_HEIGHT + 120
    draw_text(screen, "#      TYPE          SPEED    VISION    ENERGY", (70, top), mid, WHITE)
    pygame.draw.line(screen, GRAY, (70, top + 28), (WIDTH - 70, top + 28), 2)

    columns = (70, 140, 290, 390, 490)
    for i, row in enumerate(registry_rows(snap, page)):
        y = top + 40 + i * 28
        kind_color = PURPLE if row[1] == "ZOMBIE" else RED
        colors = (GRAY, kind_color, WHITE, WHITE, GREEN)
        for text, x, color in zip(row, columns, colors):
            draw_text(screen, text, (x, y), small, color)


def run_viewer(world: World) -> None:
    pygame.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT + HEADER_HEIGHT))
    pygame.display.set_caption("Valkarai vs Zombies")
    clock = pygame.time.Clock()
    fonts = (
        pygame.font.SysFont(None, 40),
        pygame.font.SysFont(None, 28),
        pygame.font.SysFont(None, 22),
    )
    state = ViewerState(world)
    threshold = world.params.reproduction_threshold

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    state.toggle_pause()
                elif event.key == pygame.K_DOWN:
                    state.scroll_by(1)
                elif event.key == pygame.K_UP:
                    state.scroll_by(-1)

        state.advance()
        snap = world.snapshot()

        screen.fill(BLACK)
        draw_world(screen, snap, threshold)
        prey, zombies = snap.counts()
        draw_text(screen, f"Valkarai: {prey} | Zombies: {zombies} | t={snap.tick}", (20, 10), fonts[1], DARKGREEN)
        if state.paused:
            draw_registry(screen, snap, state.scroll, fonts)

        pygame.display.flip()
        clock.tick(FPS)
    pygame.quit()


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Live view of the Valkarai / Zombie world")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--grid-size", type=int, default=Params.grid_size)
    ap.add_argument("--prey", type=int, default=Params.initial_prey)
    ap.add_argument("--predators", type=int, default=Params.initial_predators)
    args = ap.parse_args(argv)
    params = Params(grid_size=args.grid_size, initial_prey=args.prey, initial_predators=args.predators)
    try:
        world = World.create(args.seed, params)
    except ValueError as e:
        ap.error(str(e))
    run_viewer(world)


if __name__ == "__main__":
    main()
