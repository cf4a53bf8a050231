"""Per-epoch metrics sinks."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Mapping

_FIELDS = ("epoch", "split", "loss", "best_loss", "accuracy")


class JsonlSink:
    """Append-only JSONL writer, one record per epoch."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        seed: int | None = None,
        every: int = 1,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split
        self.seed = seed
        self.every = max(1, int(every))

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if epoch != 1 and epoch % self.every != 0:
            return
        record = {"epoch": int(epoch), "split": self.split, "seed": self.seed}
        record.update({k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))})
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write per-epoch metrics to CSV with a fixed column order."""

    def __init__(self, path: str | Path, *, split: str = "train", every: int = 1) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split
        self.every = max(1, int(every))

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if epoch != 1 and epoch % self.every != 0:
            return
        row = {"epoch": int(epoch), "split": self.split}
        row.update({k: float(metrics[k]) for k in _FIELDS[2:] if k in metrics})
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=list(_FIELDS), extrasaction="ignore")
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)


__all__ = ["JsonlSink", "CsvSink"]
