"""
behavior.py

Per-agent decision procedure for one tick.

Zombies pursue the nearest Valkarai in sight and tag every Valkarai within
mating distance for infection. Valkarai follow a fixed priority:

    flee (any Zombie within 0.8 * vision)
    > seek mate (both above the reproduction threshold, both off cooldown)
    > seek food (nearest food cell in the vision square, Desert scored 3x,
                 Ocean ignored)
    > wander

The selector only reads the registry and the terrain; infections come back as
indices on the returned `Intent` and are applied by the world after the scan.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .agents import Agent
from .config import Params, Terrain
from .terrain import TerrainField

Vec = Tuple[float, float]


class Mode(Enum):
    FLEE = "flee"
    SEEK_MATE = "seek_mate"
    SEEK_FOOD = "seek_food"
    HUNT = "hunt"
    WANDER = "wander"


@dataclass
class Intent:
    mode: Mode
    target: Optional[Vec] = None  # absolute point for SEEK_* / HUNT
    flee_dir: Optional[Vec] = None  # unnormalized (own pos - threat pos)
    infections: List[int] = field(default_factory=list)

    @property
    def fleeing(self) -> bool:
        return self.mode is Mode.FLEE


# ============================================================
# ZOMBIE
# ============================================================

def select_predator_intent(agent: Agent, agents: Sequence[Agent], params: Params) -> Intent:
    may_infect = not params.infection_respects_cooldown or agent.reproduce_cooldown == 0.0
    best_d = agent.vision_gene
    target: Optional[Vec] = None
    infections: List[int] = []
    for j, other in enumerate(agents):
        if not other.is_prey:
            continue
        d = agent.distance_to(other)
        if d < best_d:
            best_d = d
            target = (other.x, other.y)
        if may_infect and d < params.mating_distance:
            infections.append(j)
    mode = Mode.HUNT if target is not None else Mode.WANDER
    return Intent(mode, target=target, infections=infections)


# ============================================================
# VALKARAI
# ============================================================

def nearest_threat(agent: Agent, agents: Sequence[Agent], radius: float) -> Optional[Agent]:
    best_d = radius
    threat = None
    for other in agents:
        if not other.is_predator:
            continue
        d = agent.distance_to(other)
        if d < best_d:
            best_d = d
            threat = other
    return threat


def find_mate(idx: int, agent: Agent, agents: Sequence[Agent], params: Params) -> Optional[Agent]:
    """Nearest other Valkarai within 1.5 * vision that is also ready to mate."""
    if not agent.ready_to_mate(params.reproduction_threshold):
        return None
    best_d = agent.vision_gene * params.mate_radius_factor
    mate = None
    for j, other in enumerate(agents):
        if j == idx or not other.ready_to_mate(params.reproduction_threshold):
            continue
        d = agent.distance_to(other)
        if d < best_d:
            best_d = d
            mate = other
    return mate


def find_food(agent: Agent, terrain: TerrainField, params: Params) -> Optional[Vec]:
    """Centre of the best-scoring food cell in the Chebyshev square of radius floor(vision)."""
    r = int(math.floor(agent.vision_gene))
    cx, cy = terrain.cell_of(agent.x, agent.y)
    hi = terrain.size - 1
    x0, x1 = max(cx - r, 0), min(cx + r, hi) + 1
    y0, y1 = max(cy - r, 0), min(cy + r, hi) + 1

    food = terrain.food[y0:y1, x0:x1]
    kinds = terrain.terrain[y0:y1, x0:x1]
    ys, xs = np.mgrid[y0:y1, x0:x1]
    centres_x = xs + 0.5
    centres_y = ys + 0.5

    score = np.hypot(centres_x - agent.x, centres_y - agent.y)
    score = np.where(kinds == int(Terrain.DESERT), score * params.desert_penalty, score)
    usable = (food > 0.0) & (kinds != int(Terrain.OCEAN))
    score = np.where(usable, score, np.inf)

    # scan column by column: on equal scores the lowest x, then the lowest y wins
    ix, iy = np.unravel_index(int(np.argmin(score.T)), score.T.shape)
    if not np.isfinite(score[iy, ix]):
        return None
    return float(centres_x[iy, ix]), float(centres_y[iy, ix])


def select_prey_intent(
    idx: int,
    agent: Agent,
    agents: Sequence[Agent],
    terrain: TerrainField,
    params: Params,
) -> Intent:
    threat = nearest_threat(agent, agents, agent.vision_gene * params.flee_radius_factor)
    if threat is not None:
        return Intent(Mode.FLEE, flee_dir=(agent.x - threat.x, agent.y - threat.y))

    mate = find_mate(idx, agent, agents, params)
    if mate is not None:
        return Intent(Mode.SEEK_MATE, target=(mate.x, mate.y))

    food = find_food(agent, terrain, params)
    if food is not None:
        return Intent(Mode.SEEK_FOOD, target=food)

    return Intent(Mode.WANDER)


def select_intent(idx: int, agents: Sequence[Agent], terrain: TerrainField, params: Params) -> Intent:
    agent = agents[idx]
    if agent.is_predator:
        return select_predator_intent(agent, agents, params)
    return select_prey_intent(idx, agent, agents, terrain, params)
