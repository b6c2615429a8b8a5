"""
config.py

Tunables for the Valkarai / Zombie world.

Everything that shapes a run lives in `Params`; terrain-dependent tables are
plain dicts keyed by `Terrain` so they can be read without a world instance.
Defaults reproduce the reference tuning of the sandbox (100x100 grid, 40
Valkarai, a single Zombie).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Tuple


# ============================================================
# TERRAIN
# ============================================================

class Terrain(IntEnum):
    MOUNTAIN = 0
    FOREST = 1
    PLAINS = 2
    DESERT = 3
    OCEAN = 4


# Noise thresholds, highest band first. Anything at or below the last one is Ocean.
TERRAIN_BANDS: Tuple[Tuple[float, Terrain], ...] = (
    (0.5, Terrain.MOUNTAIN),
    (0.2, Terrain.FOREST),
    (-0.1, Terrain.PLAINS),
    (-0.3, Terrain.DESERT),
)

SPEED_MULT: Dict[Terrain, float] = {
    Terrain.PLAINS: 1.0,
    Terrain.FOREST: 0.6,
    Terrain.MOUNTAIN: 0.2,
    Terrain.DESERT: 0.7,
    Terrain.OCEAN: 0.1,  # lets a stranded agent crawl back out
}

FOOD_SPAWN_CHANCE: Dict[Terrain, float] = {
    Terrain.PLAINS: 0.4,
    Terrain.FOREST: 0.6,
    Terrain.MOUNTAIN: 0.1,
    Terrain.DESERT: 0.05,
    Terrain.OCEAN: 0.0,
}

TERRAIN_COLORS: Dict[Terrain, Tuple[int, int, int]] = {
    Terrain.MOUNTAIN: (80, 80, 80),
    Terrain.FOREST: (0, 100, 33),
    Terrain.PLAINS: (102, 178, 51),
    Terrain.DESERT: (253, 249, 0),
    Terrain.OCEAN: (0, 121, 241),
}

FOOD_COLOR = (153, 25, 204)

MATING_DISTANCE = 1.2


# ============================================================
# PARAMS
# ============================================================

@dataclass
class Params:
    # World
    grid_size: int = 100
    initial_prey: int = 40
    initial_predators: int = 1
    noise_scale: float = 6.0  # gaussian sigma in cells; larger -> broader biomes

    # Food
    food_spawn_attempts: int = 3
    food_spawn_prob: float = 0.8
    food_increment: float = 80.0
    bite_size: float = 20.0
    food_to_energy: float = 1.5

    # Energetics
    initial_energy: float = 100.0
    energy_soft_cap: float = 100.0
    base_cost: float = 0.1
    vision_cost: float = 0.006
    speed_cost: float = 0.45
    dire_energy: float = 40.0
    predator_energy: float = 10000.0

    # Movement / perception
    flee_radius_factor: float = 0.8
    mate_radius_factor: float = 1.5
    desert_penalty: float = 3.0
    flee_boost: float = 1.3
    wander_fraction: float = 0.5
    arrive_radius: float = 0.1

    # Reproduction
    mating_distance: float = MATING_DISTANCE
    reproduction_threshold: float = 90.0
    mating_cost: float = 50.0
    birth_energy: float = 60.0
    cooldown_time: float = 150.0
    mutation_chance: float = 0.1
    mutation_spread: float = 0.1  # factor drawn from U(1 - spread, 1 + spread)

    # Genes (initial draws and clamping ranges)
    speed_init: Tuple[float, float] = (0.12, 0.22)
    vision_init: Tuple[float, float] = (10.0, 20.0)
    speed_range: Tuple[float, float] = (0.08, 0.3)
    vision_range: Tuple[float, float] = (8.0, 30.0)
    health_range: Tuple[float, float] = (10.0, 500.0)
    damage_range: Tuple[float, float] = (1.0, 100.0)
    prey_health: float = 100.0
    prey_damage: float = 10.0

    # Zombie founders
    predator_speed: float = 0.15
    predator_vision: float = 15.0
    predator_health: float = 300.0
    predator_damage: float = 20.0

    # Policy: when True a Zombie infects only while its own cooldown is zero
    # and goes on cooldown after infecting.
    infection_respects_cooldown: bool = False

    def validate(self) -> None:
        """Raise ValueError on settings the world cannot be built from."""
        if self.grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {self.grid_size}")
        if self.initial_prey < 0 or self.initial_predators < 0:
            raise ValueError("initial populations must be non-negative")
        if self.noise_scale <= 0.0:
            raise ValueError(f"noise_scale must be positive, got {self.noise_scale}")
        if self.food_spawn_attempts < 0:
            raise ValueError("food_spawn_attempts must be non-negative")
        for name in ("food_spawn_prob", "mutation_chance"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if not 0.0 <= self.mutation_spread < 1.0:
            raise ValueError(f"mutation_spread must be in [0, 1), got {self.mutation_spread}")
        for name in (
            "speed_init", "vision_init", "speed_range", "vision_range",
            "health_range", "damage_range",
        ):
            lo, hi = getattr(self, name)
            if lo > hi:
                raise ValueError(f"{name} is inverted: ({lo}, {hi})")
        for name in (
            "food_increment", "bite_size", "food_to_energy", "mating_distance", "cooldown_time",
            "mating_cost", "reproduction_threshold", "flee_boost", "wander_fraction",
        ):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be non-negative")
        for name in ("initial_energy", "birth_energy", "predator_energy"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.desert_penalty < 1.0:
            raise ValueError(f"desert_penalty must be >= 1, got {self.desert_penalty}")
