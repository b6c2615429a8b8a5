"""Energy household of Valkarai: upkeep of senses and legs, eating from the current cell."""

from __future__ import annotations

from typing import Tuple

from .agents import Agent
from .config import Params
from .terrain import TerrainField


def metabolic_cost(agent: Agent, params: Params) -> float:
    return params.base_cost + params.vision_cost * agent.vision_gene + params.speed_cost * agent.speed_gene


def metabolize_and_feed(agent: Agent, terrain: TerrainField, params: Params) -> Tuple[float, float]:
    """One tick of upkeep + feeding. Returns (energy_spent, food_eaten).

    Zombies neither pay upkeep nor eat. Energy may drop below zero here; the
    world removes such agents at the end of the tick.
    """
    if agent.is_predator:
        return 0.0, 0.0

    spent = metabolic_cost(agent, params)
    agent.energy -= spent

    eaten = 0.0
    if agent.energy < params.energy_soft_cap:
        cx, cy = terrain.cell_of(agent.x, agent.y)
        eaten = terrain.consume(cx, cy, params.bite_size)
        agent.energy += eaten * params.food_to_energy
    return spent, eaten
