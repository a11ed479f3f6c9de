"""Core typing contracts for backpropnets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class Connection:
    """Snapshot of a single synapse: its weight and the last update applied."""

    weight: float
    delta_weight: float = 0.0


@dataclass(frozen=True)
class Example:
    """A single training sample."""

    inputs: Sequence[float]
    targets: Sequence[float]


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`backpropnets.training.trainer.OnlineTrainer.run`."""

    steps: int
    final_error: float
    metrics_path: str = ""
    manifest_path: str = ""
    summary_path: str = ""
