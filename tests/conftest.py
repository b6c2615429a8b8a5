from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from valkarai_zombies.agents import Agent, AgentKind
from valkarai_zombies.config import Params, Terrain
from valkarai_zombies.terrain import TerrainField
from valkarai_zombies.world import World


def plains(size: int) -> np.ndarray:
    return np.full((size, size), int(Terrain.PLAINS), dtype=np.int8)


@pytest.fixture
def make_world():
    """Hand-built world: flat Plains unless a terrain grid is given, no random food."""

    def _make(size=20, terrain=None, food=None, agents=(), seed=0, **overrides) -> World:
        grid = plains(size) if terrain is None else terrain
        overrides.setdefault("food_spawn_prob", 0.0)
        params = Params(grid_size=grid.shape[0], **overrides)
        return World(TerrainField(grid, food), agents, params=params, seed=seed)

    return _make


@pytest.fixture
def prey():
    def _prey(x, y, energy=50.0, speed=0.2, vision=10.0, cooldown=0.0) -> Agent:
        return Agent(x=x, y=y, energy=energy, speed_gene=speed, vision_gene=vision,
                     kind=AgentKind.PREY, reproduce_cooldown=cooldown)

    return _prey


@pytest.fixture
def zombie():
    def _zombie(x, y, vision=15.0, speed=0.15, cooldown=0.0) -> Agent:
        return Agent(x=x, y=y, energy=10000.0, speed_gene=speed, vision_gene=vision,
                     kind=AgentKind.PREDATOR, reproduce_cooldown=cooldown, health=300.0, damage=20.0)

    return _zombie
