"""
runner_evo module: evolution/mutate.py

Mutation operators for flat network weight vectors.
"""

from __future__ import annotations
import math
import random
from typing import List, Sequence

import config


def gaussian(rng: random.Random) -> float:
    """Standard normal draw via Box-Muller from two uniforms in (0, 1)."""
    u = 0.0
    while u == 0.0:
        u = rng.random()
    v = 0.0
    while v == 0.0:
        v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def mutate_weights(
    weights: Sequence[float],
    rng: random.Random,
    rate: float = config.MUTATION_RATE,
    sigma: float = config.MUTATION_SIGMA,
) -> List[float]:
    """
    Return a copy of ``weights`` where each entry, with probability ``rate``,
    gets N(0, sigma^2) noise added.
    """
    return [w + gaussian(rng) * sigma if rng.random() < rate else w for w in weights]
