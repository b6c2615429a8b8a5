"""
terrain.py

Terrain field: a square grid of biome categories plus a per-cell food level.

Both layers are numpy arrays indexed [y, x]. The terrain layer is built once
from smoothed white noise and frozen (write flag cleared); only the food layer
changes during a run.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.ndimage import gaussian_filter

from .config import (
    FOOD_COLOR,
    FOOD_SPAWN_CHANCE,
    SPEED_MULT,
    TERRAIN_BANDS,
    TERRAIN_COLORS,
    Params,
    Terrain,
)


def classify(noise_value: float) -> Terrain:
    """Map one noise sample to a terrain category (Mountain high, Ocean low)."""
    for threshold, terrain in TERRAIN_BANDS:
        if noise_value > threshold:
            return terrain
    return Terrain.OCEAN


def classify_field(noise: np.ndarray) -> np.ndarray:
    """Vectorized `classify` over a whole noise field -> int8 terrain codes."""
    conditions = [noise > threshold for threshold, _ in TERRAIN_BANDS]
    choices = [int(terrain) for _, terrain in TERRAIN_BANDS]
    return np.select(conditions, choices, default=int(Terrain.OCEAN)).astype(np.int8)


def smooth_noise(size: int, rng: np.random.Generator, scale: float) -> np.ndarray:
    """Coherent 2D noise in [-1, 1]: gaussian-blurred white noise, re-centred and rescaled."""
    raw = rng.standard_normal((size, size))
    field = gaussian_filter(raw, sigma=scale)
    field -= field.mean()
    peak = float(np.abs(field).max())
    if peak > 0.0:
        field /= peak
    return field


def terrain_rgb(terrain: np.ndarray, food: np.ndarray | None = None) -> np.ndarray:
    """(H, W, 3) float image of the terrain codes, food cells painted purple."""
    lut = np.zeros((len(Terrain), 3), dtype=float)
    for kind, color in TERRAIN_COLORS.items():
        lut[int(kind)] = np.array(color, dtype=float) / 255.0
    rgb = lut[terrain.astype(int)]
    if food is not None:
        rgb[food > 0.0] = np.array(FOOD_COLOR, dtype=float) / 255.0
    return rgb


class TerrainField:
    def __init__(self, terrain: np.ndarray, food: np.ndarray | None = None):
        terrain = np.array(terrain, dtype=np.int8)
        if terrain.ndim != 2 or terrain.shape[0] != terrain.shape[1] or terrain.shape[0] == 0:
            raise ValueError(f"terrain must be a non-empty square grid, got shape {terrain.shape}")
        terrain.setflags(write=False)
        self.terrain = terrain
        if food is None:
            self.food = np.zeros(terrain.shape, dtype=float)
        else:
            self.food = np.array(food, dtype=float)
            if self.food.shape != terrain.shape:
                raise ValueError("food and terrain layers must have the same shape")
            if np.any(self.food < 0.0):
                raise ValueError("food levels must be non-negative")

    @classmethod
    def generate(cls, size: int, rng: np.random.Generator, noise_scale: float) -> "TerrainField":
        return cls(classify_field(smooth_noise(size, rng, noise_scale)))

    @property
    def size(self) -> int:
        return self.terrain.shape[0]

    # ---- Lookups (every continuous position goes through cell_of)

    def cell_of(self, x: float, y: float) -> Tuple[int, int]:
        """Clamp a continuous position to the grid and return its (cx, cy) cell."""
        hi = self.size - 1
        cx = int(min(max(x, 0.0), hi))
        cy = int(min(max(y, 0.0), hi))
        return cx, cy

    def terrain_at(self, x: float, y: float) -> Terrain:
        cx, cy = self.cell_of(x, y)
        return Terrain(int(self.terrain[cy, cx]))

    def food_at(self, x: float, y: float) -> float:
        cx, cy = self.cell_of(x, y)
        return float(self.food[cy, cx])

    def speed_multiplier(self, x: float, y: float) -> float:
        return SPEED_MULT[self.terrain_at(x, y)]

    def standable_cells(self) -> np.ndarray:
        """(N, 2) array of (cx, cy) for every non-Ocean cell."""
        ys, xs = np.nonzero(self.terrain != int(Terrain.OCEAN))
        return np.column_stack((xs, ys))

    # ---- Food dynamics

    def regenerate(self, rng: np.random.Generator, params: Params) -> float:
        """Random food spawns for one tick. Returns the total amount added."""
        spawned = 0.0
        for _ in range(params.food_spawn_attempts):
            if rng.random() >= params.food_spawn_prob:
                continue
            cx = int(rng.integers(self.size))
            cy = int(rng.integers(self.size))
            chance = FOOD_SPAWN_CHANCE[Terrain(int(self.terrain[cy, cx]))]
            if rng.random() < chance:
                self.food[cy, cx] += params.food_increment
                spawned += params.food_increment
        return spawned

    def consume(self, cx: int, cy: int, amount: float) -> float:
        """Remove up to `amount` food from a cell and return what was actually taken."""
        if amount <= 0.0:
            return 0.0
        available = float(self.food[cy, cx])
        eaten = min(amount, available)
        if eaten <= 0.0:
            return 0.0
        # Clamp guards against float residue below zero.
        self.food[cy, cx] = max(0.0, available - eaten)
        return eaten
