"""
reproduction.py

End-of-tick structural edits: infections, mating, and offspring genes.

Nothing here touches the registry directly. Infections are applied to the
recorded indices, mating produces a list of newborns, and the world commits
newborns and prunes the dead afterwards.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

from .agents import Agent, AgentKind
from .config import Params


def apply_infections(agents: Sequence[Agent], indices: Iterable[int], params: Params) -> int:
    """Convert every tagged Valkarai once, however many Zombies tagged it."""
    converted = 0
    for idx in sorted(set(indices)):
        agent = agents[idx]
        if agent.is_prey:
            agent.infect(params.predator_energy)
            converted += 1
    return converted


def mutate(value: float, rng: np.random.Generator, params: Params) -> float:
    if rng.random() < params.mutation_chance:
        spread = params.mutation_spread
        value *= rng.uniform(1.0 - spread, 1.0 + spread)
    return value


def _clamp(value: float, bounds) -> float:
    lo, hi = bounds
    return min(max(value, lo), hi)


def make_offspring(a: Agent, b: Agent, rng: np.random.Generator, params: Params) -> Agent:
    """Child at parent a's position with averaged, possibly mutated, clamped genes."""
    speed = mutate((a.speed_gene + b.speed_gene) / 2.0, rng, params)
    vision = mutate((a.vision_gene + b.vision_gene) / 2.0, rng, params)
    health = mutate((a.health + b.health) / 2.0, rng, params)
    damage = mutate((a.damage + b.damage) / 2.0, rng, params)
    return Agent(
        x=a.x,
        y=a.y,
        energy=params.birth_energy,
        speed_gene=_clamp(speed, params.speed_range),
        vision_gene=_clamp(vision, params.vision_range),
        kind=AgentKind.PREY,
        reproduce_cooldown=params.cooldown_time,
        health=_clamp(health, params.health_range),
        damage=_clamp(damage, params.damage_range),
    )


def breed(agents: Sequence[Agent], rng: np.random.Generator, params: Params) -> List[Agent]:
    """Single mating pass in index order. Returns the newborns (not yet registered).

    Each agent mates at most once per tick. For agent i the nearest eligible
    partner j > i closer than the mating distance is chosen.
    """
    threshold = params.reproduction_threshold
    n = len(agents)
    matched = [False] * n
    newborns: List[Agent] = []

    for i in range(n):
        a = agents[i]
        if a.is_predator or matched[i] or a.energy < threshold or a.reproduce_cooldown > 0.0:
            continue

        partner = None
        best_d = params.mating_distance
        for j in range(i + 1, n):
            b = agents[j]
            if matched[j] or not b.ready_to_mate(threshold):
                continue
            d = a.distance_to(b)
            if d < best_d:
                best_d = d
                partner = j
        if partner is None:
            continue

        b = agents[partner]
        matched[i] = matched[partner] = True
        a.energy -= params.mating_cost
        b.energy -= params.mating_cost
        a.reproduce_cooldown = params.cooldown_time
        b.reproduce_cooldown = params.cooldown_time
        newborns.append(make_offspring(a, b, rng, params))

    return newborns
