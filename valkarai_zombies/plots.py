"""Matplotlib views of a finished run: population oscillations, gene drift, the map."""

from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np

from .terrain import terrain_rgb


def plot_populations(history, show: bool = False):
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(11.0, 4.2))
    t = np.arange(1, history.steps + 1)
    ax1.plot(t, history.prey, label="Valkarai", color="#ef4444")
    ax1.plot(t, history.predators, label="Zombies", color="black")
    ax1.set_xlabel("Time step")
    ax1.set_ylabel("Count")
    ax1.set_title("Population over time")
    ax1.legend()

    ax2.plot(history.prey, history.predators, color="#6b7280")
    ax2.set_xlabel("Valkarai count")
    ax2.set_ylabel("Zombie count")
    ax2.set_title("Phase plot (Zombies vs Valkarai)")
    fig.tight_layout()
    if show:
        plt.show()
    return fig


def plot_trait_evolution(history, show: bool = False):
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(8.0, 6.0), sharex=True)
    t = np.arange(1, history.steps + 1)
    speed = np.array(history.mean_speed)
    speed_sd = np.sqrt(np.array(history.var_speed))
    vision = np.array(history.mean_vision)
    vision_sd = np.sqrt(np.array(history.var_vision))

    ax1.plot(t, speed, color="#2563eb")
    ax1.fill_between(t, speed - speed_sd, speed + speed_sd, color="#2563eb", alpha=0.2)
    ax1.set_ylabel("Mean speed gene")
    ax1.set_title("Trait evolution (Valkarai)")

    ax2.plot(t, vision, color="#059669")
    ax2.fill_between(t, vision - vision_sd, vision + vision_sd, color="#059669", alpha=0.2)
    ax2.set_ylabel("Mean vision gene")
    ax2.set_xlabel("Time step")
    fig.tight_layout()
    if show:
        plt.show()
    return fig


def plot_terrain(snap, show: bool = False):
    size = snap.grid_size
    fig, ax = plt.subplots(figsize=(6.5, 6.5))
    ax.imshow(
        terrain_rgb(snap.terrain, snap.food),
        origin="lower",
        interpolation="nearest",
        extent=(0, size, 0, size),
    )
    prey = np.array([(a.x, a.y) for a in snap.agents if not a.is_predator], dtype=float).reshape(-1, 2)
    zombies = np.array([(a.x, a.y) for a in snap.agents if a.is_predator], dtype=float).reshape(-1, 2)
    ax.scatter(prey[:, 0], prey[:, 1], s=14, c="#ef4444", edgecolors="white", linewidths=0.3, label="Valkarai")
    ax.scatter(zombies[:, 0], zombies[:, 1], s=20, c="black", edgecolors="white", linewidths=0.4, label="Zombie")
    ax.set_xlim(0, size)
    ax.set_ylim(0, size)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_title(f"World at step {snap.tick}")
    ax.legend(loc="upper right", fontsize=9)
    fig.tight_layout()
    if show:
        plt.show()
    return fig
