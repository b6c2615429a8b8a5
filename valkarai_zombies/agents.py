"""
agents.py

Agent record and the registry that owns agent lifetimes.

The two kinds share one record with a discriminant (`AgentKind`); behavior
dispatch on the kind happens in behavior.py. The registry keeps insertion
order, which is also the processing order within a tick. Births append,
deaths compact, so an index is only meaningful inside a single tick.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Tuple


class AgentKind(Enum):
    PREY = "valkarai"
    PREDATOR = "zombie"


@dataclass
class Agent:
    x: float
    y: float
    energy: float
    speed_gene: float
    vision_gene: float
    kind: AgentKind = AgentKind.PREY
    reproduce_cooldown: float = 0.0
    # Dormant combat fields: inherited and blended, not consumed yet.
    health: float = 100.0
    damage: float = 10.0

    @property
    def is_predator(self) -> bool:
        return self.kind is AgentKind.PREDATOR

    @property
    def is_prey(self) -> bool:
        return self.kind is AgentKind.PREY

    @property
    def alive(self) -> bool:
        return self.energy > 0.0

    def distance_to(self, other: "Agent") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def ready_to_mate(self, threshold: float) -> bool:
        return self.is_prey and self.energy > threshold and self.reproduce_cooldown == 0.0

    def tick_cooldown(self) -> None:
        if self.reproduce_cooldown > 0.0:
            self.reproduce_cooldown = max(0.0, self.reproduce_cooldown - 1.0)

    def infect(self, predator_energy: float) -> None:
        """Prey -> Predator. There is no way back."""
        self.kind = AgentKind.PREDATOR
        self.energy = predator_energy


class AgentRegistry:
    def __init__(self, agents: Iterable[Agent] = ()):
        self._agents: List[Agent] = list(agents)

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[Agent]:
        return iter(self._agents)

    def __getitem__(self, idx: int) -> Agent:
        return self._agents[idx]

    def add(self, agent: Agent) -> None:
        self._agents.append(agent)

    def extend(self, agents: Iterable[Agent]) -> int:
        before = len(self._agents)
        self._agents.extend(agents)
        return len(self._agents) - before

    def prune_dead(self) -> int:
        """Drop every agent with energy <= 0. Returns how many were removed."""
        before = len(self._agents)
        self._agents = [a for a in self._agents if a.energy > 0.0]
        return before - len(self._agents)

    def counts(self) -> Tuple[int, int]:
        """Return (prey, predators)."""
        predators = sum(1 for a in self._agents if a.is_predator)
        return len(self._agents) - predators, predators

    def prey(self) -> List[Agent]:
        return [a for a in self._agents if a.is_prey]

    def predators(self) -> List[Agent]:
        return [a for a in self._agents if a.is_predator]
