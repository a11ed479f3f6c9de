"""Training loop and pipeline assembly."""

from .pipelines import load_preset, presets, run_pipeline
from .trainer import OnlineTrainer

__all__ = ["OnlineTrainer", "load_preset", "presets", "run_pipeline"]
