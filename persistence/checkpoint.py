"""
runner_evo module: persistence/checkpoint.py

Serializable training records:
- TrainingCheckpoint: generation, GA config and every individual's weights
- BestWeightsPayload: the best network split into named per-layer slices

Keys are camelCase so the JSON files stay compatible with the web viewer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
import random
from typing import Any, Dict, List, Optional, Sequence

import config
from neural.network import DEFAULT_ARCHITECTURE, Network, NetworkArchitecture, join_weights, split_weights


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_dict(value: Any) -> Dict[str, Any]:
    # optional sub-objects of the wrong type fall back to defaults
    return value if isinstance(value, dict) else {}


@dataclass
class TrainingConfig:
    population_size: int = config.POPULATION_SIZE
    mutation_rate: float = config.MUTATION_RATE
    crossover_rate: float = config.CROSSOVER_RATE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "populationSize": self.population_size,
            "mutationRate": self.mutation_rate,
            "crossoverRate": self.crossover_rate,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TrainingConfig":
        return TrainingConfig(
            population_size=int(data.get("populationSize", config.POPULATION_SIZE)),
            mutation_rate=float(data.get("mutationRate", config.MUTATION_RATE)),
            crossover_rate=float(data.get("crossoverRate", config.CROSSOVER_RATE)),
        )


@dataclass
class IndividualCheckpoint:
    id: int
    weights: List[float]


@dataclass
class TrainingCheckpoint:
    generation: int = 0
    config: TrainingConfig = field(default_factory=TrainingConfig)
    population: List[IndividualCheckpoint] = field(default_factory=list)
    rng_seed: Optional[int] = None
    high_score: Optional[float] = None

    def weight_sets(self) -> List[List[float]]:
        return [ind.weights for ind in self.population]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "generation": self.generation,
            "config": self.config.to_dict(),
            "population": [{"id": ind.id, "weights": list(ind.weights)} for ind in self.population],
        }
        if self.rng_seed is not None:
            data["rngSeed"] = self.rng_seed
        if self.high_score is not None:
            data["highScore"] = self.high_score
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TrainingCheckpoint":
        """
        Parse a stored checkpoint. Individuals without a weight list are
        dropped; a missing population yields an empty one.
        """
        if not isinstance(data, dict):
            raise ValueError("checkpoint must be a JSON object")

        generation = data.get("generation", 0)
        if not isinstance(generation, int) or generation < 0:
            raise ValueError(f"invalid generation: {generation!r}")

        population: List[IndividualCheckpoint] = []
        raw_pop = data.get("population")
        for i, entry in enumerate(raw_pop if isinstance(raw_pop, list) else []):
            weights = entry.get("weights") if isinstance(entry, dict) else None
            if not isinstance(weights, list):
                continue
            population.append(IndividualCheckpoint(id=int(entry.get("id", i + 1)), weights=[float(w) for w in weights]))

        seed = data.get("rngSeed")
        high = data.get("highScore")
        return TrainingCheckpoint(
            generation=generation,
            config=TrainingConfig.from_dict(_as_dict(data.get("config"))),
            population=population,
            rng_seed=int(seed) if isinstance(seed, (int, float)) else None,
            high_score=float(high) if isinstance(high, (int, float)) else None,
        )

    @staticmethod
    def from_networks(
        networks: Sequence[Network],
        generation: int,
        rng_seed: Optional[int] = None,
        high_score: Optional[float] = None,
    ) -> "TrainingCheckpoint":
        return TrainingCheckpoint(
            generation=generation,
            config=TrainingConfig(population_size=len(networks)),
            population=[IndividualCheckpoint(id=i + 1, weights=net.get_weights()) for i, net in enumerate(networks)],
            rng_seed=rng_seed,
            high_score=high_score,
        )


def build_initial_checkpoint(
    population_size: int,
    rng: Optional[random.Random] = None,
    architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE,
) -> TrainingCheckpoint:
    """Fresh generation-0 checkpoint of random networks."""
    rng = rng or random.Random()
    nets = [Network(architecture, rng=rng) for _ in range(population_size)]
    cp = TrainingCheckpoint.from_networks(nets, generation=0, rng_seed=rng.randrange(1_000_000), high_score=0.0)
    return cp


@dataclass
class BestWeightsPayload:
    weights: Dict[str, List[float]]
    architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE
    version: str = config.WEIGHTS_VERSION
    generation: int = 0
    best_fitness: float = 0.0
    created_at: str = field(default_factory=_now_iso)
    last_updated: str = field(default_factory=_now_iso)
    total_generations: int = 0
    average_fitness: float = 0.0

    @staticmethod
    def from_weights(
        weights: Sequence[float],
        architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE,
        generation: int = 0,
        best_fitness: float = 0.0,
        total_generations: int = 0,
        average_fitness: float = 0.0,
    ) -> "BestWeightsPayload":
        return BestWeightsPayload(
            weights=split_weights(weights, architecture),
            architecture=architecture,
            generation=generation,
            best_fitness=best_fitness,
            total_generations=total_generations,
            average_fitness=average_fitness,
        )

    def flat_weights(self) -> List[float]:
        return join_weights(self.weights)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "architecture": self.architecture.to_dict(),
            "generation": self.generation,
            "bestFitness": self.best_fitness,
            "weights": {k: list(v) for k, v in self.weights.items()},
            "metadata": {
                "createdAt": self.created_at,
                "lastUpdated": self.last_updated,
                "totalGenerations": self.total_generations,
                "averageFitness": self.average_fitness,
            },
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "BestWeightsPayload":
        if not isinstance(data, dict) or not isinstance(data.get("weights"), dict):
            raise ValueError("best-weights payload has no weights")

        arch_data = data.get("architecture")
        arch = NetworkArchitecture.from_dict(arch_data) if isinstance(arch_data, dict) else DEFAULT_ARCHITECTURE
        # re-split so slice lengths are validated against the architecture
        weights = split_weights(join_weights(data["weights"]), arch)
        meta = _as_dict(data.get("metadata"))
        return BestWeightsPayload(
            weights=weights,
            architecture=arch,
            version=str(data.get("version", config.WEIGHTS_VERSION)),
            generation=int(data.get("generation", 0)),
            best_fitness=float(data.get("bestFitness", 0.0)),
            created_at=str(meta.get("createdAt", _now_iso())),
            last_updated=str(meta.get("lastUpdated", _now_iso())),
            total_generations=int(meta.get("totalGenerations", 0)),
            average_fitness=float(meta.get("averageFitness", 0.0)),
        )
