import json
from pathlib import Path

import pytest

from backpropnets.training import pipelines


def _config(run_dir, seed=11, iterations=120):
    return {
        "data": {"name": "xor", "options": {"bits": 2}},
        "model": {"topology": [2, 3, 1]},
        "train": {
            "iterations": iterations,
            "seed": seed,
            "eta": 0.15,
            "alpha": 0.5,
            "smoothing_factor": 10.0,
            "run_dir": str(run_dir),
            "enable_plots": False,
        },
    }


def test_pipeline_produces_artifacts(tmp_path):
    config = _config(tmp_path / "run")
    result = pipelines.run_pipeline(config)

    assert result.steps == 120
    run_dir = tmp_path / "run"
    for name in ("metrics.jsonl", "metrics.csv", "manifest.json", "summary.json", "config.json", "evaluation.json"):
        assert (run_dir / name).exists(), name

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["dataset"]["type"] == "xor"
    assert manifest["network"]["layer_sizes"] == [3, 4, 2]
    assert manifest["network"]["hyperparameters"]["smoothing_factor"] == 10.0

    metrics = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines() if line]
    assert len(metrics) == 120
    assert metrics[0]["split"] == "train"
    assert metrics[0]["seed"] == 11
    assert all("error" in m and "recent_average_error" in m for m in metrics)
    assert result.final_error == pytest.approx(metrics[-1]["recent_average_error"])

    evaluation = json.loads((run_dir / "evaluation.json").read_text())
    assert len(evaluation) == 4


def test_pipeline_determinism(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path / "run1", seed=99))
    second = pipelines.run_pipeline(_config(tmp_path / "run2", seed=99))
    assert Path(first.metrics_path).read_text() == Path(second.metrics_path).read_text()


def test_topology_must_match_dataset(tmp_path):
    config = _config(tmp_path / "run")
    config["model"]["topology"] = [3, 2, 1]
    with pytest.raises(ValueError):
        pipelines.run_pipeline(config)


def test_sweep_runs_every_combination(tmp_path):
    config = pipelines.load_preset("xor-momentum-sweep")
    config["train"]["iterations"] = 20
    config["train"]["run_dir"] = str(tmp_path / "sweep")
    results = pipelines.run_pipeline(config)
    assert isinstance(results, list)
    assert len(results) == 6
    assert len({Path(r.metrics_path).parent for r in results}) == 6


def test_presets_include_file_presets():
    names = pipelines.presets()
    assert {"xor-demo", "xor-smoothed", "xor-momentum-sweep"} <= set(names)
    assert "xor3-wide" in names
    wide = pipelines.load_preset("xor3-wide")
    assert wide["model"]["topology"] == [3, 8, 1]
    with pytest.raises(KeyError):
        pipelines.load_preset("missing")


def test_plots_are_flushed_when_training_fails(tmp_path):
    config = _config(tmp_path / "run")
    config["train"]["enable_plots"] = True

    def fail_at_step_two(step, metrics):
        if step == 2:
            raise RuntimeError("stop")

    with pytest.raises(RuntimeError, match="stop"):
        pipelines.run_pipeline(config, callbacks=[fail_at_step_two])
    assert (tmp_path / "run" / "error.png").exists()
