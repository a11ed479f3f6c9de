"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple


class PlotAdapter:
    """Collect one metric per step and optionally emit a matplotlib figure."""

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        metric: str = "recent_average_error",
    ):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.metric = metric
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_step(self, step: int, metrics):
        if not self.enable_plots:
            return
        self._history.append((step, float(metrics.get(self.metric, 0.0))))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        steps, values = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(steps, values)
        ax.set_xlabel("Step")
        ax.set_ylabel(self.metric.replace("_", " ").capitalize())
        ax.set_title("Training Error")
        plot_path = self.run_dir / "error.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_step
