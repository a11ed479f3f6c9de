"""Command line entry point for backpropnets training runs."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Iterable

from backpropnets.training import pipelines

LOG_LEVEL_ENV = "BACKPROPNETS_LOG_LEVEL"


def configure_logging(level: str | None = None) -> None:
    """Set up root logging from ``level`` or the environment (default WARNING)."""

    level_name = (level or os.getenv(LOG_LEVEL_ENV, "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class _EchoCallback:
    """Print every training example the way the XOR demo does."""

    def on_example(self, step, example, outputs) -> None:
        rendered = "".join(f"{value:f} " for value in outputs)
        print(
            f"Inputs: {list(example.inputs)} - Output: {rendered}"
            f"Target: {list(example.targets)}"
        )


def _format_result(result) -> str:
    payload = {
        "steps": result.steps,
        "final_error": result.final_error,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def _parse_topology(text: str) -> list[int]:
    try:
        return [int(part) for part in text.replace(" ", "").split(",") if part]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid topology {text!r}") from exc


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-demo",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument(
        "--topology",
        type=_parse_topology,
        help="Comma separated layer sizes, e.g. 2,4,1",
    )
    parser.add_argument("--eta", type=float, help="Training rate in [0, 1]")
    parser.add_argument("--alpha", type=float, help="Momentum in [0, 1]")
    parser.add_argument(
        "--smoothing",
        type=float,
        help="Number of samples the recent average error spans (0 disables smoothing)",
    )
    parser.add_argument("--iterations", type=int, help="Number of training examples")
    parser.add_argument("--seed", type=int, help="Seed for weights and example order")
    parser.add_argument("--run-dir", help="Directory for run artifacts")
    parser.add_argument("--enable-plots", action="store_true", help="Write error.png")
    parser.add_argument(
        "--echo",
        action="store_true",
        help="Print inputs, outputs and targets for every training example",
    )
    parser.add_argument(
        "--log-level",
        help=f"Logging level (defaults to ${LOG_LEVEL_ENV} or WARNING)",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = dict(pipelines.read_config_file(args.config))
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    train_cfg = config.setdefault("train", {})
    overrides = {
        "eta": args.eta,
        "alpha": args.alpha,
        "smoothing_factor": args.smoothing,
        "iterations": args.iterations,
        "seed": args.seed,
        "run_dir": args.run_dir,
    }
    train_cfg.update({k: v for k, v in overrides.items() if v is not None})
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.topology:
        config.setdefault("model", {})["topology"] = args.topology

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    callbacks = [_EchoCallback()] if args.echo else []
    result = pipelines.run_pipeline(config, callbacks=callbacks)

    if isinstance(result, list):
        for item in result:
            print(_format_result(item))
    else:
        print(_format_result(result))


if __name__ == "__main__":
    main()
