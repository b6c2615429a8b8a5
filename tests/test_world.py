"""World construction, the tick pipeline and snapshots."""

from __future__ import annotations

import dataclasses
import logging

import numpy as np
import pytest

from valkarai_zombies.config import Params, Terrain
from valkarai_zombies.terrain import TerrainField
from valkarai_zombies.world import World, new_world, snapshot, step

from conftest import plains


class TestCreate:
    def test_founders_on_land(self):
        world = World.create(3, Params(grid_size=50, initial_prey=20, initial_predators=2))
        assert world.counts() == (20, 2)
        for agent in world.agents:
            assert world.terrain.terrain_at(agent.x, agent.y) is not Terrain.OCEAN
            assert 0.0 <= agent.x <= 49.0 and 0.0 <= agent.y <= 49.0

    def test_founder_genes_in_initial_ranges(self):
        world = World.create(8, Params(grid_size=30, initial_prey=25))
        for agent in world.agents.prey():
            assert agent.energy == 100.0
            assert 0.12 <= agent.speed_gene <= 0.22
            assert 10.0 <= agent.vision_gene <= 20.0
        (z,) = world.agents.predators()
        assert z.energy == 10000.0 and z.speed_gene == 0.15 and z.vision_gene == 15.0

    def test_new_world_helper(self):
        world = new_world(1, 30, 10)
        assert world.terrain.size == 30
        assert world.counts() == (10, 1)

    @pytest.mark.parametrize("size", [0, -4])
    def test_rejects_nonpositive_grid(self, size):
        with pytest.raises(ValueError):
            World.create(0, Params(grid_size=size))

    def test_rejects_mismatched_params(self):
        with pytest.raises(ValueError):
            World(TerrainField(plains(10)), params=Params(grid_size=12))

    def test_no_land_to_spawn_on(self, make_world):
        world = make_world(size=6, terrain=np.full((6, 6), int(Terrain.OCEAN), dtype=np.int8))
        with pytest.raises(ValueError):
            world.spawn_position()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"predator_energy": 0.0},
            {"birth_energy": 0.0},
            {"initial_energy": -5.0},
            {"flee_boost": -1.0},
            {"wander_fraction": -0.5},
            {"desert_penalty": 0.5},
            {"mating_cost": -1.0},
            {"reproduction_threshold": -10.0},
        ],
    )
    def test_rejects_malformed_settings(self, overrides):
        with pytest.raises(ValueError):
            World(TerrainField(plains(10)), params=Params(grid_size=10, **overrides))

    def test_creation_is_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="valkarai_zombies.world")
        World.create(2, Params(grid_size=20, initial_prey=3))
        assert "World created" in caplog.text


class TestDeterminism:
    def test_same_seed_same_history(self):
        params = Params(grid_size=40, initial_prey=15)
        a = World.create(5, params)
        b = World.create(5, params)
        for _ in range(50):
            a.step()
            b.step()
        sa, sb = a.snapshot(), b.snapshot()
        assert sa.agents == sb.agents
        np.testing.assert_array_equal(sa.terrain, sb.terrain)
        np.testing.assert_array_equal(sa.food, sb.food)

    def test_different_seed_different_map(self):
        a = World.create(5, Params(grid_size=40))
        b = World.create(6, Params(grid_size=40))
        assert not np.array_equal(a.terrain.terrain, b.terrain.terrain)


class TestLongRun:
    def test_state_stays_consistent(self):
        world = World.create(11, Params(grid_size=40, initial_prey=20))
        zombies = list(world.agents.predators())
        size = world.terrain.size
        for _ in range(300):
            world.step()
            assert np.all(world.terrain.food >= 0.0)
            for agent in world.agents:
                assert 0.0 <= agent.x <= size - 1 and 0.0 <= agent.y <= size - 1
                assert agent.energy > 0.0
                assert agent.reproduce_cooldown >= 0.0
                assert world.terrain.terrain_at(agent.x, agent.y) is not Terrain.OCEAN
            zombies.extend(a for a in world.agents.predators() if all(a is not z for z in zombies))
            assert all(z.is_predator for z in zombies)
        assert world.tick == 300


class TestTick:
    def test_flee_overrides_mating(self, make_world, prey, zombie):
        a = prey(10.0, 10.0, energy=95.0)
        b = prey(10.0, 10.5, energy=95.0)
        world = make_world(agents=[a, b, zombie(7.0, 10.0)])
        world.step()
        assert a.x > 10.0
        assert abs(a.y - 10.0) < 1e-9

    @pytest.mark.parametrize("zombie_first, fled", [(True, True), (False, False)])
    def test_later_agents_see_earlier_moves(self, make_world, prey, zombie, zombie_first, fled):
        # the Zombie starts at 8.0, exactly the flee radius, and closes to 7.7 once it moves
        p = prey(10.0, 10.0, vision=10.0)
        z = zombie(2.0, 10.0, speed=0.3)
        world = make_world(agents=[z, p] if zombie_first else [p, z])
        world.step()
        dx, dy = p.x - 10.0, p.y - 10.0
        if fled:
            assert (dx, dy) == pytest.approx((0.26, 0.0))
        else:
            assert np.hypot(dx, dy) == pytest.approx(0.1)

    def test_only_valkarai_pay_upkeep(self, make_world, prey, zombie):
        p = prey(3.0, 3.0, energy=50.0, speed=0.2, vision=10.0)
        z = zombie(17.0, 17.0, vision=5.0)
        world = make_world(agents=[p, z])
        world.step()
        assert p.energy == pytest.approx(49.75)
        assert z.energy == 10000.0
        assert world.last_report.energy_spent == pytest.approx(0.25)

    def test_desert_penalty_steers_forager(self, make_world, prey):
        grid = plains(20)
        grid[10, 7] = int(Terrain.DESERT)
        food = np.zeros((20, 20))
        food[10, 13] = 50.0
        food[10, 7] = 50.0
        p = prey(10.5, 10.5)
        world = make_world(terrain=grid, food=food, agents=[p])
        world.step()
        assert p.x > 10.5
        assert p.y == pytest.approx(10.5)

    def test_starved_agents_removed(self, make_world, prey):
        world = make_world(agents=[prey(3.0, 3.0, energy=0.1), prey(12.0, 12.0)])
        world.step()
        assert len(world.agents) == 1
        assert world.last_report.deaths == 1

    def test_contact_infects(self, make_world, prey, zombie):
        world = make_world(agents=[zombie(5.0, 5.0), prey(5.5, 5.0)])
        world.step()
        assert world.counts() == (0, 2)
        assert world.last_report.infections == 1
        assert world.agents[1].energy == 10000.0

    def test_mating_commits_newborn(self, make_world, prey):
        a = prey(5.0, 5.0, energy=95.0)
        b = prey(5.5, 5.0, energy=95.0)
        world = make_world(agents=[a, b])
        world.step()
        assert len(world.agents) == 3
        assert world.last_report.births == 1
        child = world.agents[2]
        assert (child.x, child.y) == (a.x, a.y)
        assert child.energy == 60.0

    @pytest.mark.parametrize("policy, expected", [(False, (0, 2)), (True, (1, 1))])
    def test_infection_cooldown_policy(self, make_world, prey, zombie, policy, expected):
        world = make_world(
            agents=[zombie(5.0, 5.0, cooldown=10.0), prey(5.5, 5.0)],
            infection_respects_cooldown=policy,
        )
        world.step()
        assert world.counts() == expected

    def test_infecting_starts_cooldown_under_policy(self, make_world, prey, zombie):
        z = zombie(5.0, 5.0)
        world = make_world(agents=[z, prey(5.5, 5.0)], infection_respects_cooldown=True)
        world.step()
        assert world.last_report.infections == 1
        assert z.reproduce_cooldown == world.params.cooldown_time

    def test_food_report(self, make_world):
        world = make_world(size=10, food_spawn_prob=1.0, seed=4)
        total = 0.0
        for _ in range(50):
            world.step()
            total += world.last_report.food_spawned
        assert world.terrain.food.sum() == pytest.approx(total)

    def test_module_step(self, make_world, prey):
        world = make_world(agents=[prey(3.0, 3.0)])
        step(world)
        assert world.tick == 1
        assert snapshot(world).tick == 1


class TestSnapshot:
    def test_arrays_are_read_only_copies(self, make_world, prey):
        world = make_world(agents=[prey(3.0, 3.0)])
        snap = world.snapshot()
        with pytest.raises(ValueError):
            snap.food[0, 0] = 1.0
        with pytest.raises(ValueError):
            snap.terrain[0, 0] = int(Terrain.OCEAN)
        world.terrain.food[0, 0] = 7.0
        assert snap.food[0, 0] == 0.0

    def test_agent_views_are_frozen(self, make_world, prey, zombie):
        agent = prey(3.0, 3.0)
        world = make_world(agents=[agent, zombie(15.0, 15.0)])
        snap = world.snapshot()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.agents[0].x = 9.0
        agent.x = 4.0
        assert snap.agents[0].x == 3.0
        assert snap.counts() == (1, 1)
        assert snap.grid_size == 20
        terrain, food = snap.cells
        assert terrain.shape == food.shape == (20, 20)
