import csv
import json
from pathlib import Path

from xornet.training import pipelines


def test_pipeline_produces_artifacts(tmp_path):
    config = {
        "model": {"hidden": 4, "output_init": "output"},
        "train": {
            "seed": 11,
            "epochs": 30,
            "lr": 0.5,
            "print_every": 10,
            "run_dir": str(tmp_path / "run"),
        },
    }

    result = pipelines.run_pipeline(config)
    assert result.epochs == 30
    assert result.best_loss <= result.final_loss
    assert 1 <= result.best_loss_epoch <= 30

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["config"]["model"]["hidden"] == 4
    assert set(manifest["results"]["predictions"]) == {"00", "10", "01", "11"}
    params = manifest["parameters"]
    assert len(params["weights_hidden"]) == 4
    assert len(params["weights_output"][0]) == 4

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert [r["epoch"] for r in records] == list(range(1, 31))
    first = records[0]
    assert first["split"] == "train"
    assert first["seed"] == 11
    assert all({"loss", "best_loss", "accuracy"} <= set(r) for r in records)

    with (tmp_path / "run" / "metrics.csv").open() as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == 30
    assert rows[0]["epoch"] == "1"

    summary = json.loads(Path(result.summary_path).read_text())
    assert summary["records"] == 30
    assert summary["metrics"]["loss"]["last"] == records[-1]["loss"]
    assert (tmp_path / "run" / "config.json").exists()
