"""
movement.py

Turns an `Intent` into a displacement and resolves it against the terrain.

Blocked moves slide: if the full step lands on a cell the agent may not stand
on, the X-only step is tried, then the Y-only step, otherwise the agent stays
put. Every tentative position is clamped to the grid before it is looked up.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from .agents import Agent
from .behavior import Intent, Mode
from .config import Params, Terrain
from .terrain import TerrainField

Vec = Tuple[float, float]

EPS = 1e-9


def clamp_position(x: float, y: float, size: int) -> Vec:
    hi = float(size - 1)
    return min(max(x, 0.0), hi), min(max(y, 0.0), hi)


def _scaled(vx: float, vy: float, length: float) -> Vec:
    """vx, vy rescaled to `length`; zero vector stays zero."""
    norm = math.hypot(vx, vy)
    if norm <= EPS:
        return 0.0, 0.0
    return vx / norm * length, vy / norm * length


def current_speed(agent: Agent, terrain: TerrainField) -> float:
    return agent.speed_gene * terrain.speed_multiplier(agent.x, agent.y)


def desired_displacement(
    agent: Agent,
    intent: Intent,
    terrain: TerrainField,
    params: Params,
    rng: np.random.Generator,
) -> Vec:
    speed = current_speed(agent, terrain)

    if intent.mode is Mode.FLEE and intent.flee_dir is not None:
        return _scaled(intent.flee_dir[0], intent.flee_dir[1], speed * params.flee_boost)

    if intent.target is not None:
        dx = intent.target[0] - agent.x
        dy = intent.target[1] - agent.y
        if math.hypot(dx, dy) <= params.arrive_radius:
            return 0.0, 0.0
        return _scaled(dx, dy, speed)

    angle = rng.uniform(0.0, 2.0 * math.pi)
    step = speed * params.wander_fraction
    return math.cos(angle) * step, math.sin(angle) * step


def can_stand_at(
    terrain: TerrainField,
    x: float,
    y: float,
    agent: Agent,
    fleeing: bool,
    params: Params,
) -> bool:
    kind = terrain.terrain_at(x, y)
    if kind is Terrain.OCEAN:
        return False
    if kind is Terrain.DESERT and agent.is_prey:
        dire = agent.energy < params.dire_energy or fleeing
        return dire
    return True


def resolve_move(
    agent: Agent,
    move: Vec,
    terrain: TerrainField,
    params: Params,
    fleeing: bool = False,
) -> Vec:
    """Final (x, y) for `agent` after trying `move`, with axis sliding."""
    size = terrain.size
    dx, dy = move
    if math.hypot(dx, dy) <= EPS:
        return clamp_position(agent.x, agent.y, size)

    candidates = (
        clamp_position(agent.x + dx, agent.y + dy, size),
        clamp_position(agent.x + dx, agent.y, size),
        clamp_position(agent.x, agent.y + dy, size),
    )
    for nx, ny in candidates:
        if can_stand_at(terrain, nx, ny, agent, fleeing, params):
            return nx, ny
    return clamp_position(agent.x, agent.y, size)


def move_agent(
    agent: Agent,
    intent: Intent,
    terrain: TerrainField,
    params: Params,
    rng: np.random.Generator,
) -> Vec:
    """Apply one tick of movement in place. Returns the displacement actually taken."""
    move = desired_displacement(agent, intent, terrain, params, rng)
    nx, ny = resolve_move(agent, move, terrain, params, fleeing=intent.fleeing)
    taken = (nx - agent.x, ny - agent.y)
    agent.x, agent.y = nx, ny
    return taken
