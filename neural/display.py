"""
runner_evo module: neural/display.py

The "display" network shown in the side panel. It mirrors the inputs of the
lead runner and is re-seeded with the best weights after each generation.
Listeners only read from it.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import random
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence

from neural.network import DEFAULT_ARCHITECTURE, Network, NetworkArchitecture, ShapeMismatch

if TYPE_CHECKING:
    from persistence.checkpoint import BestWeightsPayload

logger = logging.getLogger(__name__)


@dataclass
class VisualizationData:
    inputs: List[float]
    hidden1: List[float]
    hidden2: List[float]
    outputs: List[float]
    total_weights: int
    total_neurons: int
    total_biases: int
    architecture: str


Listener = Callable[[VisualizationData], None]


class NetworkDisplay:
    def __init__(self, architecture: NetworkArchitecture = DEFAULT_ARCHITECTURE, rng: Optional[random.Random] = None):
        self.architecture = architecture
        self.network = Network(architecture, rng=rng)
        self._listeners: List[Listener] = []
        # initialize activations so the panel has something to draw
        self.network.predict([0.0] * architecture.input_size)

    def on_update(self, callback: Listener) -> None:
        self._listeners.append(callback)

    def remove_callback(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self) -> None:
        data = self.visualization_data()
        for cb in list(self._listeners):
            cb(data)

    def process_inputs(self, inputs: Sequence[float]) -> Dict[str, float]:
        outputs = self.network.predict(inputs)
        self._notify()
        return {"jump": outputs[0], "duck": outputs[1], "run": outputs[2]}

    def visualization_data(self) -> VisualizationData:
        a = self.architecture
        return VisualizationData(
            inputs=list(self.network.last_inputs),
            hidden1=list(self.network.last_hidden1),
            hidden2=list(self.network.last_hidden2),
            outputs=list(self.network.last_outputs),
            total_weights=a.total_weights,
            total_neurons=a.total_neurons,
            total_biases=a.total_biases,
            architecture=a.describe(),
        )

    def get_weight(self, from_layer: str, from_index: int, to_layer: str, to_index: int) -> float:
        return self.network.get_weight(from_layer, from_index, to_layer, to_index)

    def get_weights(self) -> List[float]:
        return self.network.get_weights()

    def set_weights(self, weights: Sequence[float]) -> None:
        self.network.set_weights(weights)
        self._notify()

    def load_best_weights(self, payload: "BestWeightsPayload") -> None:
        if payload.architecture != self.architecture:
            raise ShapeMismatch(
                f"stored network is {payload.architecture.describe()}, display is {self.architecture.describe()}"
            )
        self.set_weights(payload.flat_weights())
        logger.info("Display network loaded best weights from generation %d", payload.generation)
