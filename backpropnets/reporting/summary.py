"""Convergence summary of a training run's per-step error curves."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Mapping

import numpy as np

ERROR_METRICS = ("error", "recent_average_error")


def load_records(metrics_jsonl: str | Path) -> List[Mapping[str, object]]:
    path = Path(metrics_jsonl)
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def error_curve(records: Iterable[Mapping[str, object]], metric: str) -> np.ndarray:
    return np.asarray([float(r[metric]) for r in records if metric in r], dtype=np.float64)


def convergence(curve: np.ndarray, window: int) -> Mapping[str, float | int | bool]:
    """Compare the mean error of the first and last ``window`` steps.

    ``drop`` is positive when training reduced the error; ``best_step`` is the
    first step at which the minimum was reached.
    """

    if curve.size == 0:
        return {"steps": 0}
    window = max(1, min(window, curve.size))
    head = float(np.mean(curve[:window]))
    tail = float(np.mean(curve[-window:]))
    return {
        "steps": int(curve.size),
        "first": float(curve[0]),
        "last": float(curve[-1]),
        "min": float(np.min(curve)),
        "best_step": int(np.argmin(curve)),
        "head_mean": head,
        "tail_mean": tail,
        "drop": head - tail,
        "improved": tail < head,
    }


def write_summary(
    metrics_jsonl: str | Path, out_summary_json: str | Path, *, window: int = 100
) -> str:
    """Write ``summary.json`` with a convergence block per error metric."""

    records = load_records(metrics_jsonl)
    summary = {
        "version": 2,
        "records": len(records),
        "window": window,
        "metrics": {
            name: convergence(error_curve(records, name), window)
            for name in ERROR_METRICS
        },
    }
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["ERROR_METRICS", "convergence", "error_curve", "load_records", "write_summary"]
