import json
import random

import pytest

from neural.display import NetworkDisplay
from neural.network import NetworkArchitecture
from persistence.checkpoint import TrainingCheckpoint, build_initial_checkpoint
from persistence.store import BackgroundSaver, JsonFileStore
from simulation import GameState, Simulation


def _crash_all(sim):
    for runner in sim.runners:
        runner.crash()


def test_rejects_empty_population():
    with pytest.raises(ValueError):
        Simulation(population_size=0)


def test_tick_does_nothing_until_started():
    sim = Simulation(population_size=3, seed=1)
    assert not sim.tick()
    assert sim.world.running_time == 0.0
    assert sim.state == GameState.WAITING


def test_rollover_when_every_runner_is_dead():
    seen = []
    sim = Simulation(population_size=6, seed=1, on_generation=seen.append)
    sim.start()
    sim.tick()
    _crash_all(sim)

    assert sim.tick()
    assert sim.generation == 1
    assert seen == [1]
    assert sim.population.size == 6
    assert len(sim.runners) == 6
    assert all(r.alive for r in sim.runners)
    assert all(r.fitness == 0.0 for r in sim.runners)
    assert sim.state == GameState.WAITING
    assert sim.world.running_time == 0.0


def test_auto_run_starts_next_generation():
    sim = Simulation(population_size=4, seed=2, auto_run=True)
    sim.start()
    _crash_all(sim)
    sim.tick()
    assert sim.state == GameState.PLAYING


def test_dead_runner_keeps_its_fitness():
    sim = Simulation(population_size=3, seed=3)
    sim.start()
    for _ in range(5):
        sim.tick()
    sim.runners[0].crash()
    frozen = sim.runners[0].fitness
    before = sim.runners[1].fitness
    for _ in range(5):
        sim.tick()
    assert sim.runners[0].fitness == frozen
    assert sim.runners[1].fitness != before


def test_same_seed_same_run():
    a = Simulation(population_size=5, seed=42)
    b = Simulation(population_size=5, seed=42)
    a.start()
    b.start()
    for _ in range(60):
        a.tick()
        b.tick()
    assert [r.fitness for r in a.runners] == [r.fitness for r in b.runners]
    assert [r.y for r in a.runners] == [r.y for r in b.runners]


def test_run_generation_stops_at_tick_cap():
    sim = Simulation(population_size=3, seed=4)
    # nothing spawns before the clear time, so nobody can die in 10 ticks
    assert sim.run_generation(max_ticks=10) is None
    assert sim.state == GameState.PLAYING
    assert sim.generation == 0


def test_display_follows_first_runner():
    display = NetworkDisplay(rng=random.Random(0))
    frames = []
    display.on_update(frames.append)
    sim = Simulation(population_size=3, seed=5, display=display)
    sim.start()
    sim.tick()
    sim.tick()
    assert len(frames) == 2
    assert len(frames[-1].inputs) == 12


def test_rollover_writes_checkpoint_and_best_weights(tmp_path):
    store = JsonFileStore(str(tmp_path))
    sim = Simulation(population_size=4, seed=6, store=store)
    sim.start()
    sim.tick()
    _crash_all(sim)
    sim.runners[2].fitness = 50.0
    sim.tick()

    cp = store.load_checkpoint()
    assert cp.generation == 1
    assert cp.weight_sets() == [net.get_weights() for net in sim.population.networks]

    best = store.load_best_weights()
    assert best.generation == 0
    assert best.best_fitness == 50.0
    assert best.total_generations == 1
    assert best.flat_weights() == sim.population.best_weights
    assert sim.population.networks[0].get_weights() == sim.population.best_weights


def test_load_from_store_applies_checkpoint(tmp_path):
    store = JsonFileStore(str(tmp_path))
    saved = build_initial_checkpoint(3, random.Random(7))
    saved.generation = 4
    saved.high_score = 321.0
    store.save_checkpoint(saved)

    seen = []
    sim = Simulation(population_size=5, seed=8, store=store, on_generation=seen.append)
    assert sim.load_from_store()
    assert sim.generation == 4
    assert seen == [4]
    assert sim.high_score == 321
    for i in range(3):
        assert sim.population.networks[i].get_weights() == saved.weight_sets()[i]
    assert sim.population.size == 5


def test_first_run_writes_display_weights(tmp_path):
    store = JsonFileStore(str(tmp_path))
    display = NetworkDisplay(rng=random.Random(9))
    sim = Simulation(population_size=2, seed=9, store=store, display=display)
    assert not sim.load_from_store()
    assert store.load_best_weights().flat_weights() == display.get_weights()


def test_stored_best_weights_seed_the_display(tmp_path):
    store = JsonFileStore(str(tmp_path))
    first = NetworkDisplay(rng=random.Random(10))
    Simulation(population_size=2, store=store, display=first).load_from_store()

    second = NetworkDisplay(rng=random.Random(11))
    Simulation(population_size=2, store=store, display=second).load_from_store()
    assert second.get_weights() == first.get_weights()


def test_corrupt_checkpoint_falls_back_to_random(tmp_path):
    store = JsonFileStore(str(tmp_path))
    with open(store.checkpoint_path, "w") as f:
        f.write("[[[")
    sim = Simulation(population_size=2, seed=12, store=store)
    assert not sim.load_from_store()
    assert sim.generation == 0


def test_reset_training_starts_over(tmp_path):
    store = JsonFileStore(str(tmp_path))
    display = NetworkDisplay(rng=random.Random(13))
    sim = Simulation(population_size=3, seed=13, store=store, display=display)
    sim.start()
    _crash_all(sim)
    sim.runners[0].fitness = 10.0
    sim.tick()
    assert sim.generation == 1

    cp = sim.reset_training()
    assert sim.generation == 0
    assert sim.population.best_fitness == 0.0
    assert sim.population.best_weights is None
    assert sim.high_score == 0
    assert display.get_weights() == cp.population[0].weights

    with open(store.checkpoint_path) as f:
        assert json.load(f)["generation"] == 0
    assert store.load_best_weights().flat_weights() == cp.population[0].weights


def test_checkpoint_snapshot_matches_population():
    arch = NetworkArchitecture(input_size=12, hidden1_size=4, hidden2_size=3, output_size=3)
    sim = Simulation(population_size=2, architecture=arch, seed=14)
    cp = sim.checkpoint()
    assert isinstance(cp, TrainingCheckpoint)
    assert cp.rng_seed == 14
    assert len(cp.weight_sets()[0]) == arch.total_weights


def test_wrong_type_config_in_checkpoint_still_loads(tmp_path):
    store = JsonFileStore(str(tmp_path))
    with open(store.checkpoint_path, "w") as f:
        json.dump({"generation": 1, "config": ["x"], "population": []}, f)
    sim = Simulation(population_size=2, seed=15, store=store)
    assert sim.load_from_store()
    assert sim.generation == 1


def test_unreadable_records_fall_back_to_defaults(tmp_path):
    store = JsonFileStore(str(tmp_path))
    with open(store.checkpoint_path, "wb") as f:
        f.write(b"\xff\xfe")
    with open(store.best_weights_path, "w") as f:
        json.dump({"weights": {}, "metadata": "oops"}, f)
    display = NetworkDisplay(rng=random.Random(16))
    before = display.get_weights()
    sim = Simulation(population_size=2, seed=16, store=store, display=display)
    assert not sim.load_from_store()
    assert sim.generation == 0
    assert display.get_weights() == before


def test_reset_through_background_saver_is_not_undone(tmp_path):
    saver = BackgroundSaver(JsonFileStore(str(tmp_path)))
    try:
        sim = Simulation(population_size=3, seed=17, store=saver)
        sim.start()
        _crash_all(sim)
        sim.runners[0].fitness = 10.0
        sim.tick()
        cp = sim.reset_training()
        assert saver.load_checkpoint().generation == 0
        assert saver.load_checkpoint().weight_sets() == cp.weight_sets()
    finally:
        saver.shutdown()
