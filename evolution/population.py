"""
runner_evo module: evolution/population.py

Generation record: one network + fitness slot per runner, the generation
counter and the best-ever result carried across generations.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random
from typing import List, Optional, Sequence

import config
from evolution.reproduction import GenerationResult, next_generation
from neural.network import DEFAULT_ARCHITECTURE, Network, NetworkArchitecture, ShapeMismatch

logger = logging.getLogger(__name__)


@dataclass
class Population:
    networks: List[Network] = field(default_factory=list)
    fitness: List[float] = field(default_factory=list)
    generation: int = 0
    best_fitness: float = 0.0
    best_weights: Optional[List[float]] = None
    architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE

    @staticmethod
    def random(size: int, rng: random.Random, architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE) -> "Population":
        nets = [Network(architecture, rng=rng) for _ in range(size)]
        return Population(networks=nets, fitness=[0.0] * size, architecture=architecture)

    @property
    def size(self) -> int:
        return len(self.networks)

    @property
    def average_fitness(self) -> float:
        return sum(self.fitness) / len(self.fitness) if self.fitness else 0.0

    def seed_weights(self, weight_sets: Sequence[Sequence[float]]) -> int:
        """
        Overwrite networks in order with saved weights. Entries beyond the
        population or with the wrong length are skipped; networks without a
        saved entry keep their current weights. Returns how many were applied.
        """
        applied = 0
        for net, weights in zip(self.networks, weight_sets):
            try:
                net.set_weights(weights)
            except (ShapeMismatch, TypeError, ValueError) as e:
                logger.warning("Skipping saved individual: %s", e)
                continue
            applied += 1
        return applied

    def evolve(
        self,
        rng: random.Random,
        mutation_rate: float = config.MUTATION_RATE,
        sigma: float = config.MUTATION_SIGMA,
    ) -> GenerationResult:
        """
        Rank, update best-ever, breed the next generation and reset fitness.
        """
        result = next_generation(self.networks, self.fitness, rng, mutation_rate=mutation_rate, sigma=sigma)

        # best-ever only moves on a strict improvement
        if result.best_fitness > self.best_fitness:
            self.best_fitness = result.best_fitness
            self.best_weights = list(result.best_weights)
            result.new_best = True

        self.networks = result.networks
        self.fitness = [0.0] * len(self.networks)
        self.generation += 1
        return result
