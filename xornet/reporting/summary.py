"""Deterministic training-run summaries."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import numpy as np


def _area(y: np.ndarray, x: np.ndarray) -> float:
    trapezoid = getattr(np, "trapezoid", None)
    if callable(trapezoid):
        return float(trapezoid(y, x))
    return float(np.trapz(y, x))


def compute_auc(points: Sequence[float], epochs: Sequence[float] | None = None) -> float:
    """Area under a loss curve, against ``epochs`` or an implicit unit axis."""

    if not points:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    x = (
        np.asarray(epochs, dtype=np.float64)
        if epochs is not None
        else np.arange(len(points), dtype=np.float64)
    )
    return _area(y, x)


def first_epoch_below(records: Iterable[Mapping[str, object]], threshold: float) -> int | None:
    """Return the first logged epoch whose loss is under ``threshold``."""

    for record in records:
        loss = record.get("loss")
        if isinstance(loss, (int, float)) and loss < threshold:
            return int(record.get("epoch", 0))  # type: ignore[arg-type]
    return None


def _build_summary(records: list[Mapping[str, object]], tail: int) -> Mapping[str, object]:
    tail_window = min(tail, len(records)) if records else 0
    epochs = [float(r.get("epoch", i)) for i, r in enumerate(records)]  # type: ignore[arg-type]
    summary_metrics: dict[str, Mapping[str, float]] = {}
    for name in ("loss", "accuracy"):
        values = [float(r[name]) for r in records if isinstance(r.get(name), (int, float))]
        if not values:
            continue
        arr = np.asarray(values, dtype=np.float64)
        summary_metrics[name] = {
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
            "mean": float(np.mean(arr)),
            "last": float(arr[-1]),
            "tail_auc": compute_auc(arr[-tail_window:].tolist(), epochs[-tail_window:])
            if tail_window
            else 0.0,
        }

    best = min(
        (r for r in records if isinstance(r.get("loss"), (int, float))),
        key=lambda r: float(r["loss"]),  # type: ignore[arg-type]
        default=None,
    )
    return {
        "version": 1,
        "records": len(records),
        "tail_window": tail_window,
        "best_logged_epoch": int(best["epoch"]) if best else None,  # type: ignore[arg-type]
        "epoch_loss_below_0.01": first_epoch_below(records, 0.01),
        "metrics": summary_metrics,
    }


def write_summary(
    metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32
) -> str:
    """Write a deterministic summary for ``metrics_jsonl``."""

    metrics_path = Path(metrics_jsonl)
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    records: list[Mapping[str, object]] = []
    if metrics_path.exists():
        for line in metrics_path.read_text().splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))

    summary = _build_summary(records, tail)
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["compute_auc", "first_epoch_below", "write_summary"]
