"""Preset handling and pipeline assembly for xornet runs."""

from __future__ import annotations

import json
import secrets
import time
from copy import deepcopy
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Mapping

from ..core.errors import InvalidConfigurationError
from ..core.types import RunResult
from ..reporting.artifacts import write_manifest
from ..reporting.console import ProgressPrinter, print_startup_summary
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .losses import REGISTRY as LOSS_REGISTRY
from .trainer import OUTPUT_INIT_MODES, Trainer, require_positive

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-default": {
        "model": {"hidden": 4, "output_init": "output"},
        "train": {
            "seed": 42,
            "epochs": 5000,
            "lr": 0.5,
            "loss": "bcewithlogits",
            "print_every": 1000,
            "run_dir": "runs/xor-default",
            "enable_plots": False,
        },
    },
    "xor-quick": {
        "model": {"hidden": 4, "output_init": "output"},
        "train": {
            "seed": 7,
            "epochs": 200,
            "lr": 0.5,
            "loss": "bcewithlogits",
            "print_every": 50,
            "run_dir": "runs/xor-quick",
            "enable_plots": False,
        },
    },
    "xor-legacy-init": {
        "model": {"hidden": 4, "output_init": "hidden"},
        "train": {
            "seed": 42,
            "epochs": 5000,
            "lr": 0.5,
            "loss": "bcewithlogits",
            "print_every": 1000,
            "run_dir": "runs/xor-legacy-init",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _flag(section: Mapping[str, object], key: str) -> bool:
    value = section.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidConfigurationError(f"{key} must be true or false, got {value!r}")
    return value


@dataclass
class TrainConfig:
    """Flattened, validated view of a pipeline config."""

    seed: int | None = None
    epochs: int = 5000
    lr: float = 0.5
    hidden: int = 4
    print_every: int = 1000
    output_init: str = "output"
    loss: str = "bcewithlogits"
    run_dir: str | None = None
    enable_plots: bool = False
    show_weights: bool = False
    verbose: bool = False

    @classmethod
    def from_mapping(cls, config: Mapping[str, object]) -> "TrainConfig":
        model_cfg = dict(config.get("model", {}) or {})  # type: ignore[arg-type]
        train_cfg = dict(config.get("train", {}) or {})  # type: ignore[arg-type]
        seed = train_cfg.get("seed")
        try:
            cfg = cls(
                seed=int(seed) if seed is not None else None,
                epochs=int(train_cfg.get("epochs", cls.epochs)),
                lr=float(train_cfg.get("lr", cls.lr)),
                hidden=int(model_cfg.get("hidden", cls.hidden)),
                print_every=int(train_cfg.get("print_every", cls.print_every)),
                output_init=str(model_cfg.get("output_init", cls.output_init)),
                loss=str(train_cfg.get("loss", cls.loss)),
                run_dir=str(train_cfg["run_dir"]) if train_cfg.get("run_dir") else None,
                enable_plots=_flag(train_cfg, "enable_plots"),
                show_weights=_flag(train_cfg, "show_weights"),
                verbose=_flag(train_cfg, "verbose"),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(f"Malformed training config: {exc}") from exc
        return cfg

    def validate(self) -> "TrainConfig":
        require_positive("epochs", self.epochs)
        require_positive("hidden", self.hidden)
        require_positive("lr", self.lr)
        require_positive("print_every", self.print_every)
        if self.output_init not in OUTPUT_INIT_MODES:
            raise InvalidConfigurationError(
                f"output_init must be one of {OUTPUT_INIT_MODES}, got {self.output_init!r}"
            )
        LOSS_REGISTRY.resolve(self.loss)
        return self

    def resolve_seed(self) -> int:
        if self.seed is None:
            self.seed = secrets.randbits(31)
        return self.seed

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"model", "train"} - set(data)
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


def build_trainer(cfg: TrainConfig) -> Trainer:
    """Create and seed a :class:`Trainer` from a validated config."""

    trainer = Trainer(
        hidden_size=cfg.hidden,
        lr=cfg.lr,
        loss=cfg.loss,
        output_init=cfg.output_init,
    )
    trainer.initialize(cfg.resolve_seed())
    return trainer


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Validate ``config``, train, and write metrics/summary/manifest artifacts."""

    cfg = TrainConfig.from_mapping(config).validate()
    trainer = build_trainer(cfg)

    run_dir = _resolve_run_dir(cfg)
    run_dir.mkdir(parents=True, exist_ok=True)

    if cfg.verbose:
        print_startup_summary(cfg.to_dict(), trainer.model.parameter_count())

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=cfg.seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    callbacks: list[object] = [jsonl, csv_sink, PlotAdapter(run_dir, cfg.enable_plots)]
    if cfg.verbose:
        callbacks.append(ProgressPrinter(cfg.print_every, show_weights=cfg.show_weights))

    summary = trainer.fit(cfg.epochs, callbacks=callbacks)

    results = {
        "epochs": summary.epochs,
        "final_loss": summary.final_loss,
        "best_loss": summary.best_loss,
        "best_loss_epoch": summary.best_loss_epoch,
        "predictions": {
            f"{int(s.inputs[0])}{int(s.inputs[1])}": trainer.predict(s.inputs)
            for s in trainer.samples
        },
    }
    resolved = {"model": {"hidden": cfg.hidden, "output_init": cfg.output_init}}
    resolved["train"] = {k: v for k, v in cfg.to_dict().items() if k not in resolved["model"]}
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=resolved,
        results=results,
        parameters=trainer.current_parameters().as_dict(),
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))

    return RunResult(
        epochs=summary.epochs,
        final_loss=summary.final_loss,
        best_loss=summary.best_loss,
        best_loss_epoch=summary.best_loss_epoch,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _resolve_run_dir(cfg: TrainConfig) -> Path:
    if cfg.run_dir:
        return Path(cfg.run_dir)
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / "xor"


__all__ = ["TrainConfig", "build_trainer", "run_pipeline", "load_preset", "presets"]
