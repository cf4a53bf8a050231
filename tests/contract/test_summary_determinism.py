from pathlib import Path

from xornet.training import pipelines


def test_summary_outputs_are_deterministic(tmp_path):
    config = {
        "model": {"hidden": 4, "output_init": "hidden"},
        "train": {
            "seed": 55,
            "epochs": 40,
            "lr": 0.5,
            "print_every": 10,
            "run_dir": str(tmp_path / "run_a"),
        },
    }

    first = pipelines.run_pipeline(config)
    summary_a = Path(first.summary_path).read_bytes()
    metrics_a = Path(first.metrics_path).read_bytes()

    config["train"]["run_dir"] = str(tmp_path / "run_b")
    second = pipelines.run_pipeline(config)
    summary_b = Path(second.summary_path).read_bytes()
    metrics_b = Path(second.metrics_path).read_bytes()

    assert metrics_a == metrics_b
    assert summary_a == summary_b
    assert first.final_loss == second.final_loss
