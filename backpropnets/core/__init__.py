"""Core numerical primitives for backpropnets."""

from . import activations, config, errors, network, types

__all__ = ["activations", "config", "errors", "network", "types"]
