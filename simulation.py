"""
Headless simulation loop: one shared track, one runner + network per
population slot, and a genetic-algorithm rollover once every runner is dead.
"""

from __future__ import annotations
from enum import Enum
import logging
import random
from typing import Any, Callable, Dict, List, Optional, Protocol

import config
from evolution.fitness import score_tick
from evolution.population import Population
from evolution.reproduction import GenerationResult
from neural.display import NetworkDisplay
from neural.network import DEFAULT_ARCHITECTURE, NetworkArchitecture, ShapeMismatch
from persistence.checkpoint import BestWeightsPayload, TrainingCheckpoint, build_initial_checkpoint
from persistence.store import PersistenceError
from runner.policy import apply_action, choose_action
from runner.runner import Runner
from runner.sensors import encode_inputs
from world.collision import check_collisions
from world.world import World

logger = logging.getLogger(__name__)


class TrainingStore(Protocol):
    def load_checkpoint(self) -> Optional[TrainingCheckpoint]: ...
    def save_checkpoint(self, checkpoint: TrainingCheckpoint) -> None: ...
    def load_best_weights(self) -> Optional[BestWeightsPayload]: ...
    def save_best_weights(self, payload: BestWeightsPayload) -> None: ...
    def reset(self, checkpoint: TrainingCheckpoint, best: BestWeightsPayload) -> None: ...


class GameState(Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    CRASHED = "crashed"


class Simulation:
    def __init__(
        self,
        population_size: int = config.POPULATION_SIZE,
        architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE,
        seed: Optional[int] = None,
        store: Optional[TrainingStore] = None,
        display: Optional[NetworkDisplay] = None,
        on_generation: Optional[Callable[[int], None]] = None,
        auto_run: bool = False,
    ):
        if population_size <= 0:
            raise ValueError("population_size must be positive")

        self.seed = seed
        self.rng = random.Random(seed)
        self.architecture = architecture
        self.store = store
        self.display = display
        self.on_generation = on_generation
        self.auto_run = auto_run

        self.world = World(self.rng)
        self.population = Population.random(population_size, self.rng, architecture)
        self.runners: List[Runner] = [Runner(id=i + 1) for i in range(population_size)]
        self.state = GameState.WAITING
        self.high_score = 0
        self.last_result: Optional[GenerationResult] = None

    # ---- persistence (best effort) ----

    def _persist(self, what: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except PersistenceError as e:
            logger.warning("%s failed: %s", what, e)
            return None

    def load_from_store(self) -> bool:
        """
        Seed the display network and the population from stored records.
        Returns True if a checkpoint was applied.
        """
        if self.store is None:
            return False

        if self.display is not None:
            self._load_display_weights()

        checkpoint = self._persist("Loading checkpoint", self.store.load_checkpoint)
        if checkpoint is None:
            logger.info("No checkpoint found, starting from a random population")
            return False
        self.apply_checkpoint(checkpoint)
        return True

    def _load_display_weights(self) -> None:
        try:
            payload = self.store.load_best_weights()
        except PersistenceError as e:
            logger.warning("Loading best weights failed: %s", e)
            return

        if payload is None:
            # first run: persist the display network's random weights
            fresh = BestWeightsPayload.from_weights(self.display.get_weights(), self.architecture)
            self._persist("Saving best weights", self.store.save_best_weights, fresh)
            return

        try:
            self.display.load_best_weights(payload)
        except ShapeMismatch as e:
            logger.warning("Stored best weights do not fit the network: %s", e)

    def apply_checkpoint(self, checkpoint: TrainingCheckpoint) -> None:
        """
        Replace the in-memory population with a checkpoint. Networks the
        checkpoint does not cover keep their random weights.
        """
        self.population.generation = checkpoint.generation
        used = self.population.seed_weights(checkpoint.weight_sets())
        self.population.fitness = [0.0] * self.population.size
        if checkpoint.high_score is not None:
            self.high_score = max(self.high_score, int(checkpoint.high_score))
        logger.info("Seeded from checkpoint: gen %d, used %d nets", checkpoint.generation, used)

        self.restart()
        if self.on_generation is not None:
            self.on_generation(self.population.generation)

    def checkpoint(self) -> TrainingCheckpoint:
        return TrainingCheckpoint.from_networks(
            self.population.networks,
            generation=self.population.generation,
            rng_seed=self.seed,
            high_score=self.high_score,
        )

    def save_checkpoint(self) -> None:
        if self.store is not None:
            self._persist("Saving checkpoint", self.store.save_checkpoint, self.checkpoint())

    def reset_training(self) -> TrainingCheckpoint:
        """
        Start over from a fresh random generation 0 and overwrite both stored
        records with it.
        """
        checkpoint = build_initial_checkpoint(self.population.size, self.rng, self.architecture)
        best = BestWeightsPayload.from_weights(checkpoint.population[0].weights, self.architecture)
        if self.store is not None:
            self._persist("Resetting training files", self.store.reset, checkpoint, best)

        self.population.best_fitness = 0.0
        self.population.best_weights = None
        self.high_score = 0
        self.apply_checkpoint(checkpoint)
        if self.display is not None:
            self.display.set_weights(checkpoint.population[0].weights)
        logger.info("Training reset")
        return checkpoint

    # ---- lifecycle ----

    @property
    def generation(self) -> int:
        return self.population.generation

    @property
    def alive_count(self) -> int:
        return sum(1 for r in self.runners if r.alive)

    def start(self) -> None:
        if self.state == GameState.PLAYING:
            return
        self.state = GameState.PLAYING
        for runner in self.runners:
            runner.start_running()

    def restart(self) -> None:
        self.state = GameState.WAITING
        self.world.reset()
        for runner in self.runners:
            runner.reset()
        logger.debug("Track reset, %d runners waiting", len(self.runners))

    def tick(self, dt: float = config.MS_PER_FRAME) -> bool:
        """
        Advance one frame. Returns True if the last runner died and a new
        generation was bred on this tick.
        """
        if self.state != GameState.PLAYING:
            return False

        world = self.world
        world.advance(dt)
        speed = world.speed
        nearest = world.nearest_obstacle(config.RUNNER_START_X)
        obstacles = world.obstacles.obstacles

        for i, runner in enumerate(self.runners):
            if not runner.alive:
                continue
            vector = encode_inputs(runner, nearest, speed).as_vector()
            outputs = self.population.networks[i].predict(vector)
            action = choose_action(outputs, runner, nearest)
            apply_action(runner, action, nearest, speed)

            if i == 0 and self.display is not None:
                self.display.process_inputs(vector)

            score_tick(runner, action, nearest, obstacles, speed, dt)

        for runner in self.runners:
            runner.update(dt)

        world.update_obstacles(dt)

        if world.obstacles_active:
            check_collisions(self.runners, world.obstacles.first)

        self.high_score = max(self.high_score, world.score)

        if self.alive_count == 0:
            self.end_generation()
            return True
        return False

    def end_generation(self) -> GenerationResult:
        self.state = GameState.CRASHED
        pop = self.population
        pop.fitness = [r.fitness for r in self.runners]
        finished = pop.generation
        average = pop.average_fitness

        result = pop.evolve(self.rng)
        self.last_result = result
        logger.info(
            "Generation %d ended: best %.1f, avg %.1f, best-ever %.1f, score %d",
            finished, result.best_fitness, average, pop.best_fitness, self.world.score,
        )

        if self.display is not None:
            self.display.set_weights(result.best_weights)

        if self.store is not None:
            self.save_checkpoint()
            if result.new_best and pop.best_weights is not None:
                payload = BestWeightsPayload.from_weights(
                    pop.best_weights,
                    self.architecture,
                    generation=finished,
                    best_fitness=pop.best_fitness,
                    total_generations=pop.generation,
                    average_fitness=average,
                )
                self._persist("Saving best weights", self.store.save_best_weights, payload)

        if self.on_generation is not None:
            self.on_generation(pop.generation)

        self.restart()
        if self.auto_run:
            self.start()
        return result

    def run_generation(self, max_ticks: Optional[int] = None) -> Optional[GenerationResult]:
        """
        Tick until the current generation ends (or ``max_ticks`` pass).
        Returns the breeding result, or None if the tick cap was reached.
        """
        if self.state != GameState.PLAYING:
            self.start()
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            ticks += 1
            if self.tick():
                return self.last_result
        return None

    def stats(self) -> Dict[str, Any]:
        return {
            "generation": self.population.generation,
            "alive": self.alive_count,
            "population": self.population.size,
            "score": self.world.score,
            "high_score": self.high_score,
            "speed": self.world.speed,
            "best_fitness": self.population.best_fitness,
            "state": self.state.value,
        }
