"""Fully-connected tanh network trained online with momentum backpropagation."""

from __future__ import annotations

import logging
import math
from dataclasses import fields, replace
from numbers import Integral
from typing import Dict, Iterator, List, Mapping, Sequence, overload

import numpy as np

from .activations import tanh, tanh_deriv
from .config import TrainingConfig
from .errors import InputSizeMismatch, InvalidConfig, InvalidTopology, TargetSizeMismatch
from .types import Array, Connection

logger = logging.getLogger(__name__)


def _read_only(values: Array) -> Array:
    view = values.view()
    view.flags.writeable = False
    return view


class Layer:
    """Dense per-layer storage for neuron state.

    A layer of ``size`` neurons holds ``size + 1`` slots, the last being the
    bias neuron.  Row ``i`` of ``weights`` holds the outgoing connections of
    neuron ``i``; column ``j`` addresses neuron ``j`` of the next layer.
    """

    def __init__(self, size: int, num_outputs: int, rng: np.random.Generator) -> None:
        count = size + 1
        self._outputs = np.zeros(count, dtype=np.float64)
        self._gradients = np.zeros(count, dtype=np.float64)
        self._weights = rng.random((count, num_outputs))
        self._delta_weights = np.zeros((count, num_outputs), dtype=np.float64)
        self._outputs[-1] = 1.0

    def __len__(self) -> int:
        return int(self._outputs.shape[0])

    @overload
    def __getitem__(self, index: int) -> "Neuron": ...

    @overload
    def __getitem__(self, index: slice) -> List["Neuron"]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [Neuron(self, i) for i in range(len(self))[index]]
        position = int(index)
        if position < 0:
            position += len(self)
        if not 0 <= position < len(self):
            raise IndexError(f"neuron index {index} out of range for layer of {len(self)}")
        return Neuron(self, position)

    def __iter__(self) -> Iterator["Neuron"]:
        for position in range(len(self)):
            yield Neuron(self, position)

    @property
    def bias(self) -> "Neuron":
        return Neuron(self, len(self) - 1)

    @property
    def num_outputs(self) -> int:
        return int(self._weights.shape[1])

    @property
    def outputs(self) -> Array:
        return _read_only(self._outputs)

    @property
    def gradients(self) -> Array:
        return _read_only(self._gradients)

    @property
    def weights(self) -> Array:
        return _read_only(self._weights)

    @property
    def delta_weights(self) -> Array:
        return _read_only(self._delta_weights)

    def _assign_inputs(self, values: Array) -> None:
        self._outputs[: values.shape[0]] = values


class Neuron:
    """View of one slot in a :class:`Layer`, addressed by its position."""

    __slots__ = ("_layer", "_index")

    def __init__(self, layer: Layer, index: int) -> None:
        self._layer = layer
        self._index = index

    def __repr__(self) -> str:
        return f"Neuron(index={self._index}, output_value={self.output_value:.6f})"

    @property
    def index(self) -> int:
        return self._index

    @property
    def is_bias(self) -> bool:
        return self._index == len(self._layer) - 1

    @property
    def output_value(self) -> float:
        return float(self._layer._outputs[self._index])

    @property
    def gradient(self) -> float:
        return float(self._layer._gradients[self._index])

    @property
    def outgoing_connections(self) -> tuple[Connection, ...]:
        weights = self._layer._weights[self._index]
        deltas = self._layer._delta_weights[self._index]
        return tuple(Connection(float(w), float(d)) for w, d in zip(weights, deltas))

    def feed_forward(self, prev_layer: Layer) -> None:
        # The previous layer's bias slot takes part in the sum like any other neuron.
        total = float(np.dot(prev_layer._outputs, prev_layer._weights[:, self._index]))
        self._layer._outputs[self._index] = tanh(total)

    def calculate_output_gradient(self, target: float) -> None:
        out = self.output_value
        self._layer._gradients[self._index] = (target - out) * tanh_deriv(out)

    def calculate_hidden_gradient(self, next_layer: Layer) -> None:
        # Sum over the next layer excluding its bias, whose output never changes.
        dow = float(np.dot(self._layer._weights[self._index], next_layer._gradients[:-1]))
        self._layer._gradients[self._index] = dow * tanh_deriv(self.output_value)

    def update_input_weights(self, prev_layer: Layer, config: TrainingConfig) -> None:
        column = self._index
        new_delta = (
            config.eta * prev_layer._outputs * self.gradient
            + config.alpha * prev_layer._delta_weights[:, column]
        )
        prev_layer._delta_weights[:, column] = new_delta
        prev_layer._weights[:, column] += new_delta


def _validate_topology(topology: Sequence[int]) -> List[int]:
    try:
        sizes = list(topology)
    except TypeError as exc:
        raise InvalidTopology(f"topology must be a sequence of layer sizes, got {topology!r}") from exc
    if len(sizes) < 2:
        raise InvalidTopology(f"topology needs at least an input and an output layer, got {sizes}")
    for position, size in enumerate(sizes):
        if isinstance(size, bool) or not isinstance(size, Integral) or size <= 0:
            raise InvalidTopology(f"layer {position} size must be a positive integer, got {size!r}")
    return [int(size) for size in sizes]


class Network:
    """Feed-forward network with one bias neuron appended to every layer.

    Call :meth:`feed_forward` and :meth:`back_prop` alternately, once per
    training example.  Instances are not thread-safe; give every thread its
    own network.
    """

    def __init__(
        self,
        topology: Sequence[int],
        config: TrainingConfig | None = None,
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        if rng is not None and seed is not None:
            raise TypeError("pass either rng or seed, not both")
        self.topology = _validate_topology(topology)
        self.config = config if config is not None else TrainingConfig()
        rng = rng if rng is not None else np.random.default_rng(seed)
        num_outputs = self.topology[1:] + [0]
        self.layers: List[Layer] = [
            Layer(size, outputs, rng) for size, outputs in zip(self.topology, num_outputs)
        ]
        self.current_error = 0.0
        self.recent_average_error = 0.0
        logger.debug(
            "Built network topology=%s layer_sizes=%s parameters=%d",
            self.topology,
            self.layer_sizes(),
            self.parameter_count(),
        )

    # ------------------------------------------------------------------
    # Configuration

    def configure(self, **changes: float) -> TrainingConfig:
        """Replace hyper-parameters between training calls."""

        unknown = set(changes) - {f.name for f in fields(TrainingConfig)}
        if unknown:
            raise InvalidConfig(f"unknown hyper-parameters: {sorted(unknown)}")
        self.config = replace(self.config, **changes)
        return self.config

    @property
    def eta(self) -> float:
        return self.config.eta

    @eta.setter
    def eta(self, value: float) -> None:
        self.configure(eta=value)

    @property
    def alpha(self) -> float:
        return self.config.alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        self.configure(alpha=value)

    @property
    def recent_average_smoothing_factor(self) -> float:
        return self.config.smoothing_factor

    @recent_average_smoothing_factor.setter
    def recent_average_smoothing_factor(self, value: float) -> None:
        self.configure(smoothing_factor=value)

    # ------------------------------------------------------------------
    # Training passes

    def feed_forward(self, inputs: Sequence[float]) -> None:
        values = np.asarray(inputs, dtype=np.float64)
        input_layer = self.layers[0]
        capacity = len(input_layer) - 1
        if values.ndim != 1 or values.shape[0] > capacity:
            raise InputSizeMismatch(
                f"got {values.size} input values but the input layer holds {capacity}"
            )

        input_layer._assign_inputs(values)
        for prev_layer, layer in zip(self.layers[:-1], self.layers[1:]):
            for neuron in layer[:-1]:
                neuron.feed_forward(prev_layer)

    def back_prop(self, targets: Sequence[float]) -> None:
        output_layer = self.layers[-1]
        values = np.asarray(targets, dtype=np.float64)
        expected = len(output_layer) - 1
        if values.ndim != 1 or values.shape[0] != expected:
            raise TargetSizeMismatch(
                f"got {values.size} target values but the output layer holds {expected}"
            )

        # RMS error over the non-bias outputs
        deltas = values - output_layer._outputs[:-1]
        self.current_error = math.sqrt(float(np.dot(deltas, deltas)) / expected)

        smoothing = self.config.smoothing_factor
        self.recent_average_error = (
            self.recent_average_error * smoothing + self.current_error
        ) / (smoothing + 1.0)

        for neuron, target in zip(output_layer[:-1], values):
            neuron.calculate_output_gradient(float(target))

        for idx in range(len(self.layers) - 2, 0, -1):
            next_layer = self.layers[idx + 1]
            for neuron in self.layers[idx]:
                neuron.calculate_hidden_gradient(next_layer)

        for idx in range(len(self.layers) - 1, 0, -1):
            prev_layer = self.layers[idx - 1]
            for neuron in self.layers[idx][:-1]:
                neuron.update_input_weights(prev_layer, self.config)

    # ------------------------------------------------------------------
    # Reporting

    def get_average_error(self) -> float:
        return self.recent_average_error

    def get_results(self) -> List[float]:
        return [float(v) for v in self.layers[-1]._outputs[:-1]]

    def format_results(self) -> str:
        return "".join(f"{value:f} " for value in self.get_results())

    def layer_sizes(self) -> List[int]:
        return [len(layer) for layer in self.layers]

    def parameter_count(self) -> int:
        return int(sum(layer._weights.size for layer in self.layers))

    # ------------------------------------------------------------------
    # In-memory weight access

    def state_dict(self) -> Dict[str, Array]:
        state: Dict[str, Array] = {}
        for idx, layer in enumerate(self.layers[:-1]):
            state[f"W{idx}"] = layer._weights.copy()
            state[f"dW{idx}"] = layer._delta_weights.copy()
        return state

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        """Overwrite connection weights; missing ``dW`` entries reset momentum."""

        staged = []
        for idx, layer in enumerate(self.layers[:-1]):
            key = f"W{idx}"
            if key not in state:
                raise KeyError(f"Missing weight {key} in state dict")
            weights = np.array(state[key], dtype=np.float64)
            deltas = np.array(state.get(f"dW{idx}", np.zeros_like(weights)), dtype=np.float64)
            for name, array in ((key, weights), (f"dW{idx}", deltas)):
                if array.shape != layer._weights.shape:
                    raise ValueError(
                        f"{name} has shape {array.shape}, expected {layer._weights.shape}"
                    )
            staged.append((layer, weights, deltas))
        for layer, weights, deltas in staged:
            layer._weights = weights
            layer._delta_weights = deltas


def new_network(
    topology: Sequence[int],
    config: TrainingConfig | None = None,
    *,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
) -> Network:
    """Construct a :class:`Network`; raises :class:`InvalidTopology` on bad shapes."""

    return Network(topology, config, rng=rng, seed=seed)


__all__ = ["Layer", "Neuron", "Network", "new_network"]
