from __future__ import annotations

import numpy as np
import pytest

from valkarai_zombies.config import Params
from valkarai_zombies.reproduction import apply_infections, breed, make_offspring, mutate

NO_MUTATION = Params(grid_size=20, mutation_chance=0.0)
ALWAYS_MUTATE = Params(grid_size=20, mutation_chance=1.0)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


class TestInfection:
    def test_each_prey_converted_once(self, prey, zombie):
        agents = [zombie(5.0, 5.0), prey(5.5, 5.0), prey(4.5, 5.0)]
        assert apply_infections(agents, [1, 1, 2, 1], NO_MUTATION) == 2
        assert all(a.is_predator for a in agents)
        assert agents[1].energy == NO_MUTATION.predator_energy

    def test_zombies_in_list_are_skipped(self, prey, zombie):
        agents = [zombie(5.0, 5.0), prey(5.5, 5.0)]
        assert apply_infections(agents, [0], NO_MUTATION) == 0
        assert agents[1].is_prey

    def test_starving_prey_survives_conversion(self, prey):
        agents = [prey(1.0, 1.0, energy=-0.2)]
        apply_infections(agents, [0], NO_MUTATION)
        assert agents[0].alive


class TestMutation:
    def test_no_mutation_keeps_value(self, rng):
        assert all(mutate(0.2, rng, NO_MUTATION) == 0.2 for _ in range(50))

    def test_factor_within_spread(self, rng):
        values = [mutate(10.0, rng, ALWAYS_MUTATE) for _ in range(200)]
        assert min(values) >= 9.0 and max(values) <= 11.0
        assert len(set(values)) > 1

    def test_offspring_genes_are_clamped(self, prey, rng):
        a = prey(1.0, 1.0, speed=0.3, vision=8.0)
        b = prey(1.0, 1.0, speed=0.3, vision=8.0)
        for _ in range(50):
            child = make_offspring(a, b, rng, ALWAYS_MUTATE)
            assert 0.08 <= child.speed_gene <= 0.3
            assert 8.0 <= child.vision_gene <= 30.0
            assert 10.0 <= child.health <= 500.0
            assert 1.0 <= child.damage <= 100.0


class TestBreed:
    def test_parents_pay_and_child_inherits_mean(self, prey, rng):
        a = prey(5.0, 5.0, energy=95.0, speed=0.1, vision=10.0)
        b = prey(5.5, 5.0, energy=95.0, speed=0.2, vision=20.0)
        newborns = breed([a, b], rng, NO_MUTATION)

        assert len(newborns) == 1
        child = newborns[0]
        assert (child.x, child.y) == (5.0, 5.0)
        assert child.is_prey
        assert child.energy == 60.0
        assert child.reproduce_cooldown == 150.0
        assert child.speed_gene == pytest.approx(0.15)
        assert child.vision_gene == pytest.approx(15.0)
        assert a.energy == pytest.approx(45.0) and b.energy == pytest.approx(45.0)
        assert a.reproduce_cooldown == 150.0 and b.reproduce_cooldown == 150.0

    def test_at_most_one_mating_per_agent(self, prey, rng):
        agents = [prey(5.0, 5.0, energy=95.0), prey(5.3, 5.0, energy=95.0), prey(5.0, 5.3, energy=95.0)]
        assert len(breed(agents, rng, NO_MUTATION)) == 1
        assert agents[2].energy == 95.0

    def test_two_pairs_two_children(self, prey, rng):
        agents = [
            prey(2.0, 2.0, energy=95.0), prey(12.0, 12.0, energy=95.0),
            prey(2.5, 2.0, energy=95.0), prey(12.5, 12.0, energy=95.0),
        ]
        assert len(breed(agents, rng, NO_MUTATION)) == 2

    def test_nearest_partner_chosen(self, prey, rng):
        a = prey(5.0, 5.0, energy=95.0)
        far = prey(6.0, 5.0, energy=95.0)
        near = prey(5.3, 5.0, energy=95.0)
        breed([a, far, near], rng, NO_MUTATION)
        assert near.reproduce_cooldown == 150.0
        assert far.reproduce_cooldown == 0.0

    def test_mating_distance_is_strict(self, prey, rng):
        agents = [prey(5.0, 5.0, energy=95.0), prey(6.2, 5.0, energy=95.0)]
        assert breed(agents, rng, NO_MUTATION) == []

    @pytest.mark.parametrize(
        "first, second",
        [
            ({"energy": 95.0, "cooldown": 10.0}, {"energy": 95.0}),
            ({"energy": 95.0}, {"energy": 95.0, "cooldown": 10.0}),
            ({"energy": 60.0}, {"energy": 95.0}),
            ({"energy": 95.0}, {"energy": 90.0}),
        ],
    )
    def test_unready_pairs_do_not_mate(self, prey, rng, first, second):
        agents = [prey(5.0, 5.0, **first), prey(5.5, 5.0, **second)]
        assert breed(agents, rng, NO_MUTATION) == []

    def test_zombies_never_mate(self, prey, zombie, rng):
        agents = [zombie(5.0, 5.0), prey(5.5, 5.0, energy=95.0), zombie(5.2, 5.0)]
        assert breed(agents, rng, NO_MUTATION) == []
        assert agents[1].energy == 95.0
