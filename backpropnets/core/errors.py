"""Exceptions raised by the network engine."""

from __future__ import annotations


class NetworkError(ValueError):
    """Base class for caller contract violations."""


class InvalidTopology(NetworkError):
    """Topology has fewer than two layers or a non-positive layer size."""


class InputSizeMismatch(NetworkError):
    """Input vector does not fit the input layer (bias excluded)."""


class TargetSizeMismatch(NetworkError):
    """Target vector length differs from the output layer (bias excluded)."""


class InvalidConfig(NetworkError):
    """A training hyper-parameter is out of range."""


__all__ = [
    "NetworkError",
    "InvalidTopology",
    "InputSizeMismatch",
    "TargetSizeMismatch",
    "InvalidConfig",
]
