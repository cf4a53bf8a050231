"""Plain-text progress output for interactive runs."""

from __future__ import annotations

import sys
from typing import Callable, TextIO

from ..core.types import EpochResult, NetworkParameters


def _bit(value: float) -> int:
    return int(round(float(value)))


def format_prediction_line(epoch: int, pred) -> str:
    a, b = (_bit(v) for v in pred.inputs)
    return (
        f"Epoch {epoch} | {a} XOR {b} = {pred.probability:.8f} "
        f"(logit: {pred.logit:.8f}, target: {_bit(pred.target)})"
    )


def format_weights(params: NetworkParameters) -> str:
    lines = ["Hidden Layer Weights:"]
    for row in params.hidden.weights:
        lines.append("   " + " ".join(f"{w:>12.8f}" for w in row))
    lines.append("")
    lines.append("Output Layer Weights:")
    for w in params.output.weights[0]:
        lines.append(f"   {w:>12.8f}")
    return "\n".join(lines)


class ProgressPrinter:
    """Print per-sample predictions and mean loss every ``print_every`` epochs.

    Epoch 1 is always printed.  After training, prints the best loss, the
    final XOR evaluation and, when ``show_weights`` is set, the weights.
    """

    def __init__(
        self,
        print_every: int,
        *,
        show_weights: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.print_every = max(1, int(print_every))
        self.show_weights = show_weights
        self.stream = stream

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream or sys.stdout)

    def on_epoch_result(self, result: EpochResult) -> None:
        if result.epoch != 1 and result.epoch % self.print_every != 0:
            return
        for pred in result.predictions:
            self._print(format_prediction_line(result.epoch, pred))
        self._print(f"  Loss: {result.mean_loss:.8f}")
        self._print()

    def on_train_end(self, trainer) -> None:
        self._print("-" * 40)
        self._print("Neural Network Training Complete!")
        self._print("-" * 40)
        self._print(
            f"Best Loss: {trainer.best_loss:.8f} at Epoch {trainer.best_loss_epoch}"
        )
        self._print()
        self._print("Final XOR Evaluation:")
        for sample in trainer.samples:
            a, b = (_bit(v) for v in sample.inputs)
            self._print(f"   {a} XOR {b} = {trainer.predict(sample.inputs):.8f}")
        if self.show_weights:
            self._print()
            self._print(format_weights(trainer.current_parameters()))


def print_startup_summary(
    config: dict, param_count: int, printer: Callable[[str], None] = print
) -> None:
    printer("=== xornet run ===")
    printer(f"Seed          : {config['seed']}")
    printer(f"Epochs        : {config['epochs']}")
    printer(f"Learning rate : {config['lr']}")
    printer(f"Hidden units  : {config['hidden']}")
    printer(f"Output init   : {config['output_init']}")
    printer(f"Loss          : {config['loss']}")
    printer(f"Parameters    : {param_count}")
    printer("==================")


__all__ = ["ProgressPrinter", "format_prediction_line", "format_weights", "print_startup_summary"]
