"""Online (one example per step) training loop."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Sequence, Tuple

from ..core.network import Network
from ..core.types import Example, RunResult

logger = logging.getLogger(__name__)


class OnlineTrainer:
    """Alternate ``feed_forward`` and ``back_prop`` over a stream of examples.

    Callbacks may define ``on_step(step, metrics)`` and
    ``on_example(step, example, outputs)``; plain callables are treated as
    ``on_step``.
    """

    def __init__(self, network: Network, callbacks: Sequence[object] | None = None) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])

    def run(self, examples: Iterable[Example], iterations: int) -> RunResult:
        if iterations < 1:
            raise ValueError(f"iterations must be positive, got {iterations}")

        iterator = iter(examples)
        logger.info(
            "Training topology=%s for %d iterations (eta=%s alpha=%s smoothing=%s)",
            self.network.topology,
            iterations,
            self.network.eta,
            self.network.alpha,
            self.network.recent_average_smoothing_factor,
        )
        steps = 0
        for step in range(iterations):
            try:
                example = next(iterator)
            except StopIteration:
                iterator = iter(examples)
                example = next(iterator, None)
                if example is None:
                    raise ValueError("example source is empty") from None
            outputs = self.train_step(example)
            metrics = {
                "error": self.network.current_error,
                "recent_average_error": self.network.get_average_error(),
            }
            self._emit(step, example, outputs, metrics)
            steps += 1

        final_error = self.network.get_average_error()
        logger.info("Finished %d steps, recent average error %.6f", steps, final_error)
        return RunResult(steps=steps, final_error=final_error)

    def train_step(self, example: Example) -> List[float]:
        """Run one forward/backward pair and return the pre-update outputs."""

        self.network.feed_forward(example.inputs)
        outputs = self.network.get_results()
        self.network.back_prop(example.targets)
        return outputs

    def evaluate(self, examples: Iterable[Example]) -> List[Tuple[Example, List[float]]]:
        """Forward-only pass over ``examples``; weights are left untouched."""

        results = []
        for example in examples:
            self.network.feed_forward(example.inputs)
            results.append((example, self.network.get_results()))
        return results

    # ------------------------------------------------------------------
    # Internal helpers

    def _emit(
        self,
        step: int,
        example: Example,
        outputs: List[float],
        metrics: Mapping[str, float],
    ) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_example"):
                callback.on_example(step, example, outputs)  # type: ignore[attr-defined]
            if hasattr(callback, "on_step"):
                callback.on_step(step, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(step, metrics)


__all__ = ["OnlineTrainer"]
