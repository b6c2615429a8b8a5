#!/usr/bin/env python3
"""
Parameter sweep over independent worlds.

- Runs N replicates for every combination of two Params fields
- Records Valkarai survival probability, final counts, mean extinction step
- Appends results to a CSV in batches; combinations already in the CSV are skipped
- `--heatmap` draws survival probability over the two swept fields

Run:
  python -m valkarai_zombies.sweep --x mating_cost=30,40,50,60 --y initial_predators=1,2,4
  python -m valkarai_zombies.sweep --csv sweep.csv --heatmap
"""

from __future__ import annotations

import argparse
import csv
import itertools
import os
import sys
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import fields, replace
from typing import Dict, List, Optional, Sequence, Set, Tuple

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

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

RESULT_FIELDS = ["survival_prob", "prey_avg", "zombie_avg", "extinction_step_avg", "replicates"]


def parse_axis(axis: str, base: Params) -> Tuple[str, List]:
    """'mating_cost=30,40,50' -> ('mating_cost', [30.0, 40.0, 50.0]) typed like the Params field."""
    name, sep, raw = axis.partition("=")
    name = name.strip()
    known = {f.name for f in fields(Params)}
    if not sep or name not in known:
        raise ValueError(f"bad sweep axis {axis!r}: expected <Params field>=v1,v2,...")
    cast = type(getattr(base, name))
    if cast not in (int, float):
        raise ValueError(f"sweep axis {name!r} is not numeric")
    values = [cast(float(v)) if cast is int else cast(v) for v in raw.split(",") if v.strip()]
    if not values:
        raise ValueError(f"sweep axis {name!r} has no values")
    return name, values


def run_replicate(params: Params, steps: int, seed: int) -> Tuple[bool, int, int, Optional[int]]:
    """(valkarai_survived, final_valkarai, final_zombies, extinction_step)."""
    world = World.create(seed, params)
    for _ in range(steps):
        world.step()
        prey, zombies = world.counts()
        if prey == 0:
            return False, 0, zombies, world.tick
    prey, zombies = world.counts()
    return True, prey, zombies, None


def simulate_param_set(
    combo: Tuple,
    param_names: Sequence[str],
    base: Params,
    n_reps: int,
    steps: int,
    seed_base: int,
) -> Dict[str, float]:
    param_dict = dict(zip(param_names, combo))
    params = replace(base, **param_dict)
    survived = 0
    prey_sum = 0
    zombie_sum = 0
    extinction_steps: List[int] = []
    for rep in range(n_reps):
        ok, prey, zombies, ext = run_replicate(params, steps, seed_base + rep)
        survived += int(ok)
        prey_sum += prey
        zombie_sum += zombies
        if ext is not None:
            extinction_steps.append(ext)
    row: Dict[str, float] = {k: float(v) for k, v in param_dict.items()}
    row.update({
        "survival_prob": survived / n_reps,
        "prey_avg": prey_sum / n_reps,
        "zombie_avg": zombie_sum / n_reps,
        "extinction_step_avg": (sum(extinction_steps) / len(extinction_steps)) if extinction_steps else float("nan"),
        "replicates": n_reps,
    })
    return row


def _key(values) -> Tuple:
    return tuple(round(float(v), 6) for v in values)


def load_completed(csv_path: str, param_names: Sequence[str]) -> Set[Tuple]:
    completed: Set[Tuple] = set()
    if not os.path.exists(csv_path) or os.path.getsize(csv_path) == 0:
        return completed
    try:
        df = pd.read_csv(csv_path)
    except (pd.errors.EmptyDataError, OSError) as e:
        print(f"Warning: could not read {csv_path}: {e}")
        return completed
    if not all(name in df.columns for name in param_names):
        return completed
    for values in df[list(param_names)].itertuples(index=False):
        completed.add(_key(values))
    return completed


def run_sweep(
    grid: Dict[str, List],
    base: Params,
    csv_path: str,
    n_reps: int = 5,
    steps: int = 2000,
    seed_base: int = 0,
    max_workers: int = 0,
    batch_size: int = 50,
) -> int:
    """Run every missing combination of `grid`; returns how many were computed.

    max_workers=0 runs in-process, otherwise a ProcessPoolExecutor is used.
    """
    if n_reps < 1:
        raise ValueError(f"n_reps must be at least 1, got {n_reps}")
    param_names = list(grid.keys())
    combos = list(itertools.product(*[grid[k] for k in param_names]))
    completed = load_completed(csv_path, param_names)
    todo = [c for c in combos if _key(c) not in completed]
    print(f"Sweep: {len(combos)} combinations, {len(combos) - len(todo)} already in {csv_path}")

    fieldnames = param_names + RESULT_FIELDS
    write_header = not os.path.exists(csv_path) or os.path.getsize(csv_path) == 0
    buffer: List[Dict[str, float]] = []
    done = 0

    def flush() -> None:
        nonlocal write_header, buffer
        if not buffer:
            return
        with open(csv_path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            if write_header:
                writer.writeheader()
                write_header = False
            writer.writerows(buffer)
        buffer = []

    def collect(row: Dict[str, float]) -> None:
        nonlocal done
        done += 1
        buffer.append(row)
        print(
            f"Progress: {done}/{len(todo)} "
            + " ".join(f"{n}={row[n]:g}" for n in param_names)
            + f" survival={row['survival_prob']:.2f}"
        )
        if len(buffer) >= batch_size:
            flush()

    if max_workers <= 0:
        for combo in todo:
            row = simulate_param_set(combo, param_names, base, n_reps, steps, seed_base)
            collect(row)
    else:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(simulate_param_set, combo, param_names, base, n_reps, steps, seed_base)
                for combo in todo
            ]
            for future in as_completed(futures):
                row = future.result()
                collect(row)
    flush()
    return done


def plot_heatmap(
    df: pd.DataFrame,
    x: str,
    y: str,
    value: str = "survival_prob",
    fixed: Optional[Dict[str, float]] = None,
    ax=None,
):
    dff = df.copy()
    for k, v in (fixed or {}).items():
        dff = dff[dff[k] == v]
    pivot = dff.pivot_table(index=y, columns=x, values=value, aggfunc="mean").sort_index(ascending=False)
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))
    sns.heatmap(
        pivot,
        annot=True,
        fmt=".2f",
        cmap="viridis",
        cbar_kws={"label": value.replace("_", " ")},
        ax=ax,
    )
    title = value.replace("_", " ").capitalize()
    if fixed:
        title += f"\nFixed: {fixed}"
    ax.set_title(title)
    ax.set_xlabel(x.replace("_", " "))
    ax.set_ylabel(y.replace("_", " "))
    ax.figure.tight_layout()
    return ax


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Grid search over Valkarai / Zombie parameters")
    ap.add_argument("--x", default="mating_cost=30,40,50,60")
    ap.add_argument("--y", default="initial_predators=1,2,4")
    ap.add_argument("--grid-size", type=int, default=60)
    ap.add_argument("--reps", type=int, default=5)
    ap.add_argument("--steps", type=int, default=2000)
    ap.add_argument("--seed-base", type=int, default=0)
    ap.add_argument("--workers", type=int, default=os.cpu_count() or 1)
    ap.add_argument("--csv", default="sweep_results.csv")
    ap.add_argument("--heatmap", action="store_true", help="plot the CSV after the sweep")
    args = ap.parse_args(argv)
    if args.reps < 1:
        ap.error(f"--reps must be at least 1, got {args.reps}")

    base = Params(grid_size=args.grid_size)
    try:
        base.validate()
        x_name, x_vals = parse_axis(args.x, base)
        y_name, y_vals = parse_axis(args.y, base)
    except ValueError as e:
        ap.error(str(e))

    run_sweep(
        {x_name: x_vals, y_name: y_vals},
        base,
        args.csv,
        n_reps=args.reps,
        steps=args.steps,
        seed_base=args.seed_base,
        max_workers=args.workers,
    )
    if args.heatmap:
        plot_heatmap(pd.read_csv(args.csv), x_name, y_name)
        plt.show()


if __name__ == "__main__":
    main()
