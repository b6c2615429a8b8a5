#!/usr/bin/env python3
"""
run.py

Headless driver for the Valkarai / Zombie world.

Runs a world for a number of ticks, records population and gene statistics
per tick, prints a progress line every `--report-every` ticks and a summary at
the end. Optionally shows the matplotlib plots or opens the pygame viewer on
the final world.

Run:
  python -m valkarai_zombies.run --steps 3000 --seed 7
  python -m valkarai_zombies.run --grid-size 60 --prey 25 --plot
  python -m valkarai_zombies.run --view
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

# Support both direct script execution and module execution.
if __package__:
    from .config import Params
    from .world import World
else:
    repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)
    from valkarai_zombies.config import Params
    from valkarai_zombies.world import World

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # keep matplotlib / PIL debug chatter out of the run log
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ============================================================
# HISTORY
# ============================================================

@dataclass
class RunHistory:
    prey: List[int] = field(default_factory=list)
    predators: List[int] = field(default_factory=list)
    mean_speed: List[float] = field(default_factory=list)
    var_speed: List[float] = field(default_factory=list)
    mean_vision: List[float] = field(default_factory=list)
    var_vision: List[float] = field(default_factory=list)
    births: List[int] = field(default_factory=list)
    infections: List[int] = field(default_factory=list)
    deaths: List[int] = field(default_factory=list)
    food_stock: List[float] = field(default_factory=list)
    extinction_tick: Optional[int] = None

    @property
    def steps(self) -> int:
        return len(self.prey)

    def record(self, world: World) -> None:
        prey = world.agents.prey()
        n_prey, n_pred = world.counts()
        self.prey.append(n_prey)
        self.predators.append(n_pred)
        if prey:
            speeds = np.array([a.speed_gene for a in prey], dtype=float)
            visions = np.array([a.vision_gene for a in prey], dtype=float)
            self.mean_speed.append(float(speeds.mean()))
            self.var_speed.append(float(speeds.var()))
            self.mean_vision.append(float(visions.mean()))
            self.var_vision.append(float(visions.var()))
        else:
            self.mean_speed.append(0.0)
            self.var_speed.append(0.0)
            self.mean_vision.append(0.0)
            self.var_vision.append(0.0)
        report = world.last_report
        self.births.append(report.births)
        self.infections.append(report.infections)
        self.deaths.append(report.deaths)
        self.food_stock.append(float(np.sum(world.terrain.food)))


# ============================================================
# RUN SIMULATION
# ============================================================

def run_sim(
    params: Params,
    steps: int,
    seed: Optional[int] = None,
    report_every: int = 200,
    stop_on_extinction: bool = True,
    world: Optional[World] = None,
) -> Tuple[World, RunHistory]:
    """Advance a (new or given) world `steps` ticks and record what happened."""
    if world is None:
        world = World.create(seed, params)
    history = RunHistory()

    for t in range(steps):
        world.step()
        history.record(world)
        n_prey, n_pred = history.prey[-1], history.predators[-1]

        if report_every > 0 and (t + 1) % report_every == 0:
            print(
                f"t={world.tick:5d} valkarai={n_prey:4d} zombies={n_pred:4d} "
                f"mean_speed={history.mean_speed[-1]:.3f} mean_vision={history.mean_vision[-1]:.2f}"
            )

        if n_prey == 0 and history.extinction_tick is None:
            history.extinction_tick = world.tick
            print(f"Valkarai extinct at step {world.tick}: zombies={n_pred}")
            if stop_on_extinction:
                break

    return world, history


def print_summary(history: RunHistory) -> None:
    if history.steps == 0:
        print("No steps recorded.")
        return
    births = sum(history.births)
    infections = sum(history.infections)
    deaths = sum(history.deaths)
    print(
        f"Run summary: steps={history.steps} final_valkarai={history.prey[-1]} "
        f"final_zombies={history.predators[-1]} peak_valkarai={max(history.prey)} "
        f"births={births} infections={infections} starved={deaths}"
    )
    tail_n = min(200, history.steps)
    alive = [i for i in range(history.steps - tail_n, history.steps) if history.prey[i] > 0]
    if alive:
        tail_speed = sum(history.mean_speed[i] for i in alive) / len(alive)
        tail_vision = sum(history.mean_vision[i] for i in alive) / len(alive)
        print(f"Mean speed gene  (last {tail_n}): {tail_speed:.3f}")
        print(f"Mean vision gene (last {tail_n}): {tail_vision:.2f}")
    else:
        print("No Valkarai in the final window -> gene summary skipped.")


# ============================================================
# MAIN
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Valkarai vs Zombies grid world")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--grid-size", type=int, default=Params.grid_size)
    ap.add_argument("--prey", type=int, default=Params.initial_prey, help="founding Valkarai")
    ap.add_argument("--predators", type=int, default=Params.initial_predators, help="founding Zombies")
    ap.add_argument("--steps", type=int, default=3000)
    ap.add_argument("--report-every", type=int, default=200)
    ap.add_argument("--noise-scale", type=float, default=Params.noise_scale)
    ap.add_argument("--mutation-chance", type=float, default=Params.mutation_chance)
    ap.add_argument("--infection-respects-cooldown", action="store_true", default=False)
    ap.add_argument("--keep-going", dest="stop_on_extinction", action="store_false", default=True,
                    help="keep stepping after the Valkarai die out")
    ap.add_argument("--plot", action="store_true", help="show population and trait plots")
    ap.add_argument("--view", action="store_true", help="open the pygame viewer instead of a headless run")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def params_from_args(args: argparse.Namespace) -> Params:
    params = replace(
        Params(),
        grid_size=args.grid_size,
        initial_prey=args.prey,
        initial_predators=args.predators,
        noise_scale=args.noise_scale,
        mutation_chance=args.mutation_chance,
        infection_respects_cooldown=args.infection_respects_cooldown,
    )
    params.validate()
    return params


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = build_parser()
    args = ap.parse_args(argv)
    setup_logging(args.verbose)
    try:
        params = params_from_args(args)
    except ValueError as e:
        ap.error(str(e))

    if args.view:
        if __package__:
            from .viewer import run_viewer
        else:
            from valkarai_zombies.viewer import run_viewer
        run_viewer(World.create(args.seed, params))
        return

    world, history = run_sim(
        params,
        steps=args.steps,
        seed=args.seed,
        report_every=args.report_every,
        stop_on_extinction=args.stop_on_extinction,
    )
    print_summary(history)

    if args.plot:
        if __package__:
            from . import plots
        else:
            from valkarai_zombies import plots
        plots.plot_populations(history, show=True)
        plots.plot_trait_evolution(history, show=True)
        plots.plot_terrain(world.snapshot(), show=True)


if __name__ == "__main__":
    main()
