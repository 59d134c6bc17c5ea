"""
runner_evo module: evolution/selection.py

Selection helpers.
"""

from __future__ import annotations
import random
from typing import List, Sequence


def rank_indices(fitness: Sequence[float]) -> List[int]:
    """Indices ordered by fitness, best first (stable for ties)."""
    return sorted(range(len(fitness)), key=lambda i: fitness[i], reverse=True)


def tournament_select(fitness: Sequence[float], k: int, rng: random.Random) -> int:
    """
    Sample ``k`` indices uniformly (with replacement) and return the fittest.
    On ties the earliest drawn candidate is kept.
    """
    n = len(fitness)
    best = rng.randrange(n)
    for _ in range(1, k):
        challenger = rng.randrange(n)
        if fitness[challenger] > fitness[best]:
            best = challenger
    return best


def tournament_size(pop_size: int) -> int:
    return max(2, pop_size // 4)


def build_parent_pool(fitness: Sequence[float], k: int, rng: random.Random) -> List[int]:
    return [tournament_select(fitness, k, rng) for _ in range(len(fitness))]
