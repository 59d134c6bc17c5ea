"""
runner_evo module: evolution/reproduction.py

Builds the next generation of networks:
- slot 0 is an exact clone of this generation's best (elitism)
- a slice of random non-best survivors is cloned for diversity
- the rest are tournament-picked parents crossed over and mutated
"""

from __future__ import annotations
from dataclasses import dataclass
import random
from typing import List, Optional, Sequence

import config
from evolution.mutate import mutate_weights
from evolution.selection import build_parent_pool, rank_indices, tournament_size
from neural.network import Network


@dataclass
class GenerationResult:
    networks: List[Network]
    best_index: int
    best_fitness: float
    best_weights: List[float]
    new_best: bool = False


def crossover_single_point(
    a: Sequence[float],
    b: Sequence[float],
    rng: random.Random,
    point: Optional[int] = None,
) -> List[float]:
    """
    Child takes ``a[:point]`` and ``b[point:]`` over the shorter parent's length.
    The cut point is drawn from [1, len - 1) unless given.
    """
    n = min(len(a), len(b))
    if n == 0:
        return []
    if point is None:
        point = 1 + int(rng.random() * (n - 1))
    return list(a[:point]) + list(b[point:n])


def diversity_indices(pop_size: int, best_index: int, rng: random.Random, fraction: float = config.DIVERSITY_FRACTION) -> List[int]:
    """
    Shuffled picks of non-best individuals to carry over unchanged. The best
    is skipped (not replaced) if it lands in the drawn slice.
    """
    count = int(pop_size * fraction)
    shuffled = list(range(pop_size))
    rng.shuffle(shuffled)
    picks = [i for i in shuffled[:count] if i != best_index]
    return picks[: max(0, pop_size - 1)]


def next_generation(
    networks: Sequence[Network],
    fitness: Sequence[float],
    rng: random.Random,
    mutation_rate: float = config.MUTATION_RATE,
    sigma: float = config.MUTATION_SIGMA,
) -> GenerationResult:
    pop_size = len(networks)
    ranked = rank_indices(fitness)
    best_idx = ranked[0]

    pool = build_parent_pool(fitness, tournament_size(pop_size), rng)

    new_nets: List[Network] = [networks[best_idx].clone()]

    for idx in diversity_indices(pop_size, best_idx, rng):
        if len(new_nets) >= pop_size:
            break
        new_nets.append(networks[idx].clone())

    arch = networks[best_idx].architecture
    while len(new_nets) < pop_size:
        p1 = networks[pool[rng.randrange(len(pool))]]
        p2 = networks[pool[rng.randrange(len(pool))]]
        child_w = crossover_single_point(p1.get_weights(), p2.get_weights(), rng)
        new_nets.append(Network.from_weights(mutate_weights(child_w, rng, rate=mutation_rate, sigma=sigma), arch))

    return GenerationResult(
        networks=new_nets,
        best_index=best_idx,
        best_fitness=fitness[best_idx],
        best_weights=networks[best_idx].get_weights(),
    )
