"""
world.py

The World ties the terrain field and the agent registry together and advances
them one tick at a time.

Tick order:
  1) food regeneration
  2) for each agent in registry order: cooldown tick, intent selection,
     movement, upkeep + feeding (later agents see earlier agents' new
     positions)
  3) infections recorded during the scan are applied
  4) mating pass -> newborns
  5) commit: newborns appended, agents with energy <= 0 removed

Renderers and analysis code read the world through `snapshot()`, which hands
out copies only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .agents import Agent, AgentKind, AgentRegistry
from .behavior import select_intent
from .config import Params
from .metabolism import metabolize_and_feed
from .movement import clamp_position, move_agent
from .reproduction import apply_infections, breed
from .terrain import TerrainField

log = logging.getLogger(__name__)


# ============================================================
# REPORTS / SNAPSHOTS
# ============================================================

@dataclass
class TickReport:
    tick: int = 0
    food_spawned: float = 0.0
    food_eaten: float = 0.0
    energy_spent: float = 0.0
    infections: int = 0
    births: int = 0
    deaths: int = 0


@dataclass(frozen=True)
class AgentView:
    index: int
    x: float
    y: float
    energy: float
    reproduce_cooldown: float
    speed_gene: float
    vision_gene: float
    kind: AgentKind
    health: float
    damage: float

    @property
    def is_predator(self) -> bool:
        return self.kind is AgentKind.PREDATOR

    def ready_to_mate(self, threshold: float) -> bool:
        return (
            self.kind is AgentKind.PREY
            and self.energy > threshold
            and self.reproduce_cooldown == 0.0
        )


@dataclass(frozen=True)
class WorldSnapshot:
    tick: int
    grid_size: int
    terrain: np.ndarray  # read-only copy, [y, x]
    food: np.ndarray  # read-only copy, [y, x]
    agents: Tuple[AgentView, ...]

    @property
    def cells(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.terrain, self.food

    def counts(self) -> Tuple[int, int]:
        """Return (prey, predators)."""
        predators = sum(1 for a in self.agents if a.is_predator)
        return len(self.agents) - predators, predators


def _frozen_copy(arr: np.ndarray) -> np.ndarray:
    out = arr.copy()
    out.setflags(write=False)
    return out


# ============================================================
# WORLD
# ============================================================

class World:
    def __init__(
        self,
        terrain: TerrainField,
        agents: Iterable[Agent] = (),
        params: Optional[Params] = None,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.params = params if params is not None else Params(grid_size=terrain.size)
        self.params.validate()
        if self.params.grid_size != terrain.size:
            raise ValueError(
                f"params.grid_size={self.params.grid_size} does not match terrain size {terrain.size}"
            )
        self.seed = seed
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.terrain = terrain
        self.agents = AgentRegistry(agents)
        self.tick = 0
        self.last_report = TickReport()

    @classmethod
    def create(cls, seed: Optional[int], params: Params) -> "World":
        """Generate terrain from `seed` and place the founding population on land."""
        params.validate()
        rng = np.random.default_rng(seed)
        terrain = TerrainField.generate(params.grid_size, rng, params.noise_scale)
        world = cls(terrain, params=params, seed=seed, rng=rng)
        world._seed_population()
        land = len(terrain.standable_cells()) / float(params.grid_size ** 2)
        log.info(
            "World created: seed=%s grid=%d land=%.0f%% valkarai=%d zombies=%d",
            seed, params.grid_size, 100.0 * land, params.initial_prey, params.initial_predators,
        )
        return world

    def _seed_population(self) -> None:
        p = self.params
        for _ in range(p.initial_prey):
            x, y = self.spawn_position()
            self.agents.add(Agent(
                x=x, y=y,
                energy=p.initial_energy,
                speed_gene=float(self.rng.uniform(*p.speed_init)),
                vision_gene=float(self.rng.uniform(*p.vision_init)),
                kind=AgentKind.PREY,
                health=p.prey_health,
                damage=p.prey_damage,
            ))
        for _ in range(p.initial_predators):
            x, y = self.spawn_position()
            self.agents.add(Agent(
                x=x, y=y,
                energy=p.predator_energy,
                speed_gene=p.predator_speed,
                vision_gene=p.predator_vision,
                kind=AgentKind.PREDATOR,
                health=p.predator_health,
                damage=p.predator_damage,
            ))

    def spawn_position(self) -> Tuple[float, float]:
        """Uniform random point on a non-Ocean cell."""
        land = self.terrain.standable_cells()
        if len(land) == 0:
            raise ValueError("terrain has no standable cell to place agents on")
        cx, cy = land[int(self.rng.integers(len(land)))]
        x = float(cx) + float(self.rng.random())
        y = float(cy) + float(self.rng.random())
        return clamp_position(x, y, self.terrain.size)

    # ---- Tick

    def step(self) -> None:
        p = self.params
        report = TickReport(tick=self.tick + 1)
        report.food_spawned = self.terrain.regenerate(self.rng, p)

        agents = self.agents
        pending_infections: List[int] = []
        for i in range(len(agents)):
            agent = agents[i]
            agent.tick_cooldown()
            intent = select_intent(i, agents, self.terrain, p)
            if intent.infections:
                pending_infections.extend(intent.infections)
                if p.infection_respects_cooldown:
                    agent.reproduce_cooldown = p.cooldown_time
            move_agent(agent, intent, self.terrain, p, self.rng)
            spent, eaten = metabolize_and_feed(agent, self.terrain, p)
            report.energy_spent += spent
            report.food_eaten += eaten

        report.infections = apply_infections(agents, pending_infections, p)
        newborns = breed(agents, self.rng, p)
        report.births = agents.extend(newborns)
        report.deaths = agents.prune_dead()

        self.tick += 1
        self.last_report = report
        if report.infections or report.births or report.deaths:
            log.debug(
                "t=%d infections=%d births=%d deaths=%d",
                self.tick, report.infections, report.births, report.deaths,
            )

    # ---- Read-only views

    def counts(self) -> Tuple[int, int]:
        return self.agents.counts()

    def snapshot(self) -> WorldSnapshot:
        views = tuple(
            AgentView(
                index=i,
                x=a.x,
                y=a.y,
                energy=a.energy,
                reproduce_cooldown=a.reproduce_cooldown,
                speed_gene=a.speed_gene,
                vision_gene=a.vision_gene,
                kind=a.kind,
                health=a.health,
                damage=a.damage,
            )
            for i, a in enumerate(self.agents)
        )
        return WorldSnapshot(
            tick=self.tick,
            grid_size=self.terrain.size,
            terrain=_frozen_copy(self.terrain.terrain),
            food=_frozen_copy(self.terrain.food),
            agents=views,
        )


# ============================================================
# MODULE-LEVEL API
# ============================================================

def new_world(
    seed: Optional[int],
    grid_size: int,
    initial_population: int,
    params: Optional[Params] = None,
) -> World:
    """Deterministic world for (seed, params): `initial_population` Valkarai plus the Zombie founders."""
    base = params if params is not None else Params()
    return World.create(seed, replace(base, grid_size=grid_size, initial_prey=initial_population))


def step(world: World) -> None:
    world.step()


def snapshot(world: World) -> WorldSnapshot:
    return world.snapshot()
