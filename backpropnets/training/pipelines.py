"""Pipeline assembly: config -> dataset, network, trainer and run artifacts."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core.config import TrainingConfig
from ..core.network import Network
from ..core.types import RunResult
from ..data import get_dataset
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import OnlineTrainer

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-demo": {
        "data": {"name": "xor", "options": {"bits": 2}},
        "model": {"topology": [2, 4, 1]},
        "train": {
            "iterations": 1000,
            "seed": 7,
            "eta": 0.15,
            "alpha": 0.5,
            "smoothing_factor": 0.0,
            "run_dir": "runs/xor-demo",
            "enable_plots": False,
        },
    },
    "xor-smoothed": {
        "data": {"name": "xor", "options": {"bits": 2}},
        "model": {"topology": [2, 4, 1]},
        "train": {
            "iterations": 3000,
            "seed": 11,
            "eta": 0.15,
            "alpha": 0.5,
            "smoothing_factor": 100.0,
            "run_dir": "runs/xor-smoothed",
            "enable_plots": False,
        },
    },
    "xor-momentum-sweep": {
        "sweep": {
            "etas": [0.15],
            "alphas": [0.0, 0.5, 0.9],
            "seeds": [0, 1],
        },
        "data": {"name": "xor", "options": {"bits": 2}},
        "model": {"topology": [2, 4, 1]},
        "train": {
            "iterations": 500,
            "smoothing_factor": 0.0,
            "run_dir": "runs/xor-momentum-sweep",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Decode a JSON or YAML config file into a mapping."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(
    config: Mapping[str, object], callbacks: Sequence[object] = ()
) -> RunResult | List[RunResult]:
    if "sweep" in config:
        return _run_sweep(config, callbacks)
    return _train_single(config, callbacks)


def build_network(config: Mapping[str, object]) -> Network:
    """Construct the network described by ``config`` with seeded weights."""

    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])
    seed = int(train_cfg.get("seed", 0))
    return Network(
        model_cfg["topology"],
        TrainingConfig.from_mapping(train_cfg),
        rng=np.random.default_rng(seed),
    )


def _run_sweep(config: Mapping[str, object], callbacks: Sequence[object]) -> List[RunResult]:
    sweep_cfg = config["sweep"]
    base_dir = Path(config.get("train", {}).get("run_dir", "runs/sweep"))
    results: List[RunResult] = []
    for eta in sweep_cfg.get("etas", [0.15]):
        for alpha in sweep_cfg.get("alphas", [0.5]):
            for seed in sweep_cfg.get("seeds", [0]):
                cfg = deepcopy(dict(config))
                cfg.pop("sweep", None)
                train_cfg = cfg.setdefault("train", {})
                train_cfg.update({"eta": eta, "alpha": alpha, "seed": seed})
                train_cfg["run_dir"] = str(base_dir / f"eta{eta}_alpha{alpha}_s{seed}")
                results.append(_train_single(cfg, callbacks))
    return results


def _train_single(config: Mapping[str, object], callbacks: Sequence[object]) -> RunResult:
    data_cfg = dict(config["data"])
    train_cfg = dict(config["train"])

    dataset = get_dataset(data_cfg["name"], **data_cfg.get("options", {}))
    network = build_network(config)
    topology = network.topology
    if topology[0] != dataset.d_in:
        raise ValueError(f"Topology input size {topology[0]} but dataset has d_in={dataset.d_in}")
    if topology[-1] != dataset.d_out:
        raise ValueError(f"Topology output size {topology[-1]} but dataset has d_out={dataset.d_out}")

    seed = int(train_cfg.get("seed", 0))
    iterations = int(train_cfg.get("iterations", 1000))
    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        network=network,
        iterations=iterations,
        seed=seed,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))

    trainer = OnlineTrainer(network, callbacks=[jsonl, csv_sink, plots, *callbacks])
    # Examples are drawn from their own stream so weight init and sampling stay independent.
    try:
        result = trainer.run(dataset.stream(seed + 1), iterations)
    finally:
        plots.close()

    evaluation = [
        {"inputs": list(example.inputs), "targets": list(example.targets), "outputs": outputs}
        for example, outputs in trainer.evaluate(dataset.examples)
    ]
    (run_dir / "evaluation.json").write_text(json.dumps(evaluation, indent=2))

    safe_config = json.loads(json.dumps(config))
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        network={
            "topology": topology,
            "layer_sizes": network.layer_sizes(),
            "parameters": network.parameter_count(),
            "hyperparameters": network.config.to_dict(),
        },
    )
    summary_window = int(train_cfg.get("summary_window", 100))
    summary_path = write_summary(jsonl.path, run_dir / "summary.json", window=summary_window)
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))
    logger.info("Wrote run artifacts to %s", run_dir)

    return RunResult(
        steps=result.steps,
        final_error=result.final_error,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=str(summary_path),
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(train_cfg["run_dir"])
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    network: Network,
    iterations: int,
    seed: int,
) -> None:
    print("=== backpropnets run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Topology      : {network.topology}")
    for idx, size in enumerate(network.layer_sizes()):
        print(f"Layer {idx} has {size} neurons")
    print(f"Eta / alpha   : {network.eta} / {network.alpha}")
    print(f"Smoothing     : {network.recent_average_smoothing_factor}")
    print(f"Iterations    : {iterations}")
    print(f"Seed          : {seed}")
    print(f"Parameters    : {network.parameter_count()}")
    print("========================")


__all__ = ["build_network", "load_preset", "presets", "read_config_file", "run_pipeline"]
