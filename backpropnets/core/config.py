"""Per-network training hyper-parameters."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from numbers import Real
from typing import Any, Dict, Mapping

from .errors import InvalidConfig

DEFAULT_ETA = 0.15
DEFAULT_ALPHA = 0.5


@dataclass(frozen=True)
class TrainingConfig:
    """Learning rate, momentum and error smoothing for one network.

    Attributes
    ----------
    eta:
        Overall training rate in ``[0, 1]``.
    alpha:
        Momentum, the fraction of the previous weight change carried into the
        next one, in ``[0, 1]``.
    smoothing_factor:
        Number of recent samples the running average error spans.  The
        default of ``0.0`` means no smoothing at all: the "recent average"
        is simply the latest RMS error.  Set a positive count explicitly to
        get a genuine running average.
    """

    eta: float = DEFAULT_ETA
    alpha: float = DEFAULT_ALPHA
    smoothing_factor: float = 0.0

    def __post_init__(self) -> None:
        for name in ("eta", "alpha"):
            value = getattr(self, name)
            if not _is_number(value) or not 0.0 <= value <= 1.0:
                raise InvalidConfig(f"{name} must be a number in [0, 1], got {value!r}")
        if not _is_number(self.smoothing_factor) or self.smoothing_factor < 0.0:
            raise InvalidConfig(
                f"smoothing_factor must be a non-negative number, got {self.smoothing_factor!r}"
            )
        # numpy scalars are stored as plain floats
        for f in fields(self):
            object.__setattr__(self, f.name, float(getattr(self, f.name)))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TrainingConfig":
        """Build a config from a ``train`` section, ignoring unrelated keys."""

        known = {f.name for f in fields(cls)}
        values = {}
        for key, raw in mapping.items():
            if key not in known:
                continue
            if isinstance(raw, bool):
                raise InvalidConfig(f"{key} must be a number, got {raw!r}")
            try:
                values[key] = float(raw)
            except (TypeError, ValueError) as exc:
                raise InvalidConfig(f"{key} must be a number, got {raw!r}") from exc
        return cls(**values)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


__all__ = ["DEFAULT_ALPHA", "DEFAULT_ETA", "TrainingConfig"]
