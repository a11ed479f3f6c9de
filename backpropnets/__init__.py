"""backpropnets public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.config import TrainingConfig
from .core.errors import (
    InputSizeMismatch,
    InvalidConfig,
    InvalidTopology,
    NetworkError,
    TargetSizeMismatch,
)
from .core.network import Layer, Network, Neuron, new_network
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import OnlineTrainer

__all__ = [
    "InputSizeMismatch",
    "InvalidConfig",
    "InvalidTopology",
    "Layer",
    "Network",
    "NetworkError",
    "Neuron",
    "OnlineTrainer",
    "TargetSizeMismatch",
    "TrainingConfig",
    "activations",
    "load_preset",
    "new_network",
    "presets",
    "run_pipeline",
    "types",
]
