"""Command line entry point: train a small network to learn XOR."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable

from xornet.core.errors import InitializationOrderError, InvalidConfigurationError, ShapeMismatchError
from xornet.training import pipelines
from xornet.training.trainer import OUTPUT_INIT_MODES


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "final_loss": result.final_loss,
        "best_loss": result.best_loss,
        "best_loss_epoch": result.best_loss_epoch,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor-default",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument(
        "--seed",
        type=int,
        help="Integer seed; pass a negative value to draw a random one",
    )
    parser.add_argument("--epochs", type=int, help="Number of training epochs")
    parser.add_argument("--lr", type=float, help="Learning rate")
    parser.add_argument("--hidden", type=int, help="Number of hidden neurons")
    parser.add_argument("--print-every", type=int, help="Display interval in epochs")
    parser.add_argument(
        "--output-init",
        choices=OUTPUT_INIT_MODES,
        help="Xavier bound used for the output layer weights",
    )
    parser.add_argument("--run-dir", help="Directory for metrics and manifest files")
    parser.add_argument(
        "--show-weights", action="store_true", help="Print the final weights after training"
    )
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a loss curve PNG to the run dir"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only print the final result line"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        import yaml

        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def build_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        config = _merge(config, _load_override(args.config))

    model_cfg = config.setdefault("model", {})
    train_cfg = config.setdefault("train", {})
    if args.seed is not None:
        train_cfg["seed"] = None if args.seed < 0 else int(args.seed)
    if args.epochs is not None:
        train_cfg["epochs"] = args.epochs
    if args.lr is not None:
        train_cfg["lr"] = args.lr
    if args.print_every is not None:
        train_cfg["print_every"] = args.print_every
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.hidden is not None:
        model_cfg["hidden"] = args.hidden
    if args.output_init:
        model_cfg["output_init"] = args.output_init
    if args.show_weights:
        train_cfg["show_weights"] = True
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    train_cfg["verbose"] = not args.quiet
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = build_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    try:
        result = pipelines.run_pipeline(config)
    except (InvalidConfigurationError, InitializationOrderError, ShapeMismatchError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(_format_result(result))


if __name__ == "__main__":
    main()
