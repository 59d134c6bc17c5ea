"""
runner_evo module: neural/network.py

Fixed-shape feedforward network driving one runner:
- input -> hidden1 -> hidden2 -> output, sigmoid on every layer
- weights flatten to a single vector for the genetic algorithm
- last activations are cached for the visualization panel
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import copy
import math
import random


LAYERS = ("input", "hidden1", "hidden2", "output")


class ShapeMismatch(ValueError):
    """Raised when a vector does not match the network architecture."""


def _sigmoid(x: float) -> float:
    # clamp keeps math.exp in range for large negative sums
    x = max(-60.0, min(60.0, x))
    return 1.0 / (1.0 + math.exp(-x))


@dataclass(frozen=True)
class NetworkArchitecture:
    input_size: int = 12
    hidden1_size: int = 8
    hidden2_size: int = 6
    output_size: int = 3

    @property
    def sizes(self) -> tuple[int, int, int, int]:
        return (self.input_size, self.hidden1_size, self.hidden2_size, self.output_size)

    @property
    def total_biases(self) -> int:
        return self.hidden1_size + self.hidden2_size + self.output_size

    @property
    def total_weights(self) -> int:
        """Connection weights plus biases: the length of a flat weight vector."""
        ih1 = self.input_size * self.hidden1_size
        h1h2 = self.hidden1_size * self.hidden2_size
        h2o = self.hidden2_size * self.output_size
        return ih1 + h1h2 + h2o + self.total_biases

    @property
    def total_neurons(self) -> int:
        return sum(self.sizes)

    def describe(self) -> str:
        return " → ".join(str(s) for s in self.sizes)

    def to_dict(self) -> Dict[str, int]:
        return {
            "inputSize": self.input_size,
            "hidden1Size": self.hidden1_size,
            "hidden2Size": self.hidden2_size,
            "outputSize": self.output_size,
        }

    @staticmethod
    def from_dict(data: dict) -> "NetworkArchitecture":
        return NetworkArchitecture(
            input_size=int(data["inputSize"]),
            hidden1_size=int(data["hidden1Size"]),
            hidden2_size=int(data["hidden2Size"]),
            output_size=int(data["outputSize"]),
        )


DEFAULT_ARCHITECTURE = NetworkArchitecture()

# names of the per-layer slices of a flat weight vector, in flatten order
WEIGHT_PARTS = (
    "inputToHidden1",
    "hidden1ToHidden2",
    "hidden2ToOutput",
    "biasHidden1",
    "biasHidden2",
    "biasOutput",
)


def _part_lengths(arch: NetworkArchitecture) -> List[int]:
    return [
        arch.input_size * arch.hidden1_size,
        arch.hidden1_size * arch.hidden2_size,
        arch.hidden2_size * arch.output_size,
        arch.hidden1_size,
        arch.hidden2_size,
        arch.output_size,
    ]


def split_weights(flat: Sequence[float], arch: NetworkArchitecture = DEFAULT_ARCHITECTURE) -> Dict[str, List[float]]:
    """
    Slice a flat weight vector into its named per-layer parts.
    """
    if len(flat) != arch.total_weights:
        raise ShapeMismatch(f"expected {arch.total_weights} weights, got {len(flat)}")
    parts: Dict[str, List[float]] = {}
    start = 0
    for name, n in zip(WEIGHT_PARTS, _part_lengths(arch)):
        parts[name] = [float(w) for w in flat[start:start + n]]
        start += n
    return parts


def join_weights(parts: Dict[str, Sequence[float]]) -> List[float]:
    flat: List[float] = []
    for name in WEIGHT_PARTS:
        flat.extend(float(w) for w in parts[name])
    return flat


@dataclass
class NetworkState:
    """Snapshot of activations and weights for external rendering."""
    inputs: List[float]
    hidden1: List[float]
    hidden2: List[float]
    outputs: List[float]
    weights_ih1: List[List[float]]
    weights_h1h2: List[List[float]]
    weights_h2o: List[List[float]]
    bias_h1: List[float]
    bias_h2: List[float]
    bias_o: List[float]


@dataclass
class Network:
    architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE
    rng: Optional[random.Random] = field(default=None, repr=False, compare=False)

    weights_ih1: List[List[float]] = field(default_factory=list)
    weights_h1h2: List[List[float]] = field(default_factory=list)
    weights_h2o: List[List[float]] = field(default_factory=list)
    bias_h1: List[float] = field(default_factory=list)
    bias_h2: List[float] = field(default_factory=list)
    bias_o: List[float] = field(default_factory=list)

    last_inputs: List[float] = field(default_factory=list)
    last_hidden1: List[float] = field(default_factory=list)
    last_hidden2: List[float] = field(default_factory=list)
    last_outputs: List[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        rng = self.rng if self.rng is not None else random.Random()
        # the generator is only needed for initialization
        self.rng = None
        if not self.weights_ih1:
            self._initialize(rng)

    def _initialize(self, rng: random.Random) -> None:
        a = self.architecture

        def matrix(rows: int, cols: int) -> List[List[float]]:
            return [[rng.uniform(-1.0, 1.0) for _ in range(cols)] for _ in range(rows)]

        self.weights_ih1 = matrix(a.input_size, a.hidden1_size)
        self.weights_h1h2 = matrix(a.hidden1_size, a.hidden2_size)
        self.weights_h2o = matrix(a.hidden2_size, a.output_size)
        self.bias_h1 = [rng.uniform(-1.0, 1.0) for _ in range(a.hidden1_size)]
        self.bias_h2 = [rng.uniform(-1.0, 1.0) for _ in range(a.hidden2_size)]
        self.bias_o = [rng.uniform(-1.0, 1.0) for _ in range(a.output_size)]

    @staticmethod
    def from_weights(weights: Sequence[float], architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE) -> "Network":
        a = architecture
        net = Network(
            a,
            weights_ih1=[[0.0] * a.hidden1_size for _ in range(a.input_size)],
            weights_h1h2=[[0.0] * a.hidden2_size for _ in range(a.hidden1_size)],
            weights_h2o=[[0.0] * a.output_size for _ in range(a.hidden2_size)],
            bias_h1=[0.0] * a.hidden1_size,
            bias_h2=[0.0] * a.hidden2_size,
            bias_o=[0.0] * a.output_size,
        )
        net.set_weights(weights)
        return net

    @staticmethod
    def _layer(inputs: Sequence[float], weights: List[List[float]], bias: List[float]) -> List[float]:
        out: List[float] = []
        for j, b in enumerate(bias):
            total = b
            for i, x in enumerate(inputs):
                total += x * weights[i][j]
            out.append(_sigmoid(total))
        return out

    def predict(self, inputs: Sequence[float]) -> List[float]:
        if len(inputs) != self.architecture.input_size:
            raise ShapeMismatch(f"expected {self.architecture.input_size} inputs, got {len(inputs)}")

        self.last_inputs = [float(x) for x in inputs]
        self.last_hidden1 = self._layer(self.last_inputs, self.weights_ih1, self.bias_h1)
        self.last_hidden2 = self._layer(self.last_hidden1, self.weights_h1h2, self.bias_h2)
        self.last_outputs = self._layer(self.last_hidden2, self.weights_h2o, self.bias_o)
        return list(self.last_outputs)

    def get_weights(self) -> List[float]:
        flat: List[float] = []
        for matrix in (self.weights_ih1, self.weights_h1h2, self.weights_h2o):
            for row in matrix:
                flat.extend(row)
        flat.extend(self.bias_h1)
        flat.extend(self.bias_h2)
        flat.extend(self.bias_o)
        return flat

    def set_weights(self, weights: Sequence[float]) -> None:
        if len(weights) != self.architecture.total_weights:
            raise ShapeMismatch(f"expected {self.architecture.total_weights} weights, got {len(weights)}")

        it = iter(float(w) for w in weights)
        for matrix in (self.weights_ih1, self.weights_h1h2, self.weights_h2o):
            for row in matrix:
                for j in range(len(row)):
                    row[j] = next(it)
        for bias in (self.bias_h1, self.bias_h2, self.bias_o):
            for j in range(len(bias)):
                bias[j] = next(it)

    def total_weights(self) -> int:
        return self.architecture.total_weights

    def clone(self) -> "Network":
        return copy.deepcopy(self)

    def state(self) -> NetworkState:
        return NetworkState(
            inputs=list(self.last_inputs),
            hidden1=list(self.last_hidden1),
            hidden2=list(self.last_hidden2),
            outputs=list(self.last_outputs),
            weights_ih1=[list(r) for r in self.weights_ih1],
            weights_h1h2=[list(r) for r in self.weights_h1h2],
            weights_h2o=[list(r) for r in self.weights_h2o],
            bias_h1=list(self.bias_h1),
            bias_h2=list(self.bias_h2),
            bias_o=list(self.bias_o),
        )

    def get_weight(self, from_layer: str, from_index: int, to_layer: str, to_index: int) -> float:
        """
        Weight of a single connection. Layer pairs that are not directly
        connected (e.g. input -> output) have no weight and return 0.
        """
        if from_layer == "input" and to_layer == "hidden1":
            return self.weights_ih1[from_index][to_index]
        if from_layer == "hidden1" and to_layer == "hidden2":
            return self.weights_h1h2[from_index][to_index]
        if from_layer == "hidden2" and to_layer == "output":
            return self.weights_h2o[from_index][to_index]
        return 0.0
