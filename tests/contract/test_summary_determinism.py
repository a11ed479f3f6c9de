from pathlib import Path

from backpropnets.training import pipelines


def test_summary_outputs_are_deterministic(tmp_path):
    config = pipelines.load_preset("xor-smoothed")
    config["train"]["iterations"] = 300
    config["train"]["run_dir"] = str(tmp_path / "run_a")

    first = pipelines.run_pipeline(config)
    summary_a = Path(first.summary_path).read_bytes()
    metrics_a = Path(first.metrics_path).read_bytes()

    config["train"]["run_dir"] = str(tmp_path / "run_b")
    second = pipelines.run_pipeline(config)

    assert Path(second.metrics_path).read_bytes() == metrics_a
    assert Path(second.summary_path).read_bytes() == summary_a
