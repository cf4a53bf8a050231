"""Core typing contracts for xornet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

Array = np.ndarray
Vector = np.ndarray
Matrix = np.ndarray


@dataclass(frozen=True)
class Sample:
    """A single training example: an input vector and a scalar target."""

    inputs: Vector
    target: float


@dataclass
class LayerParameters:
    """Weights (rows = output units) and biases of one dense layer."""

    weights: Matrix
    biases: Vector

    def copy(self) -> "LayerParameters":
        return LayerParameters(weights=self.weights.copy(), biases=self.biases.copy())


@dataclass
class NetworkParameters:
    """Parameters of the two-layer network."""

    hidden: LayerParameters
    output: LayerParameters

    def copy(self) -> "NetworkParameters":
        return NetworkParameters(hidden=self.hidden.copy(), output=self.output.copy())

    def as_dict(self) -> Dict[str, List]:
        return {
            "weights_hidden": self.hidden.weights.tolist(),
            "bias_hidden": self.hidden.biases.tolist(),
            "weights_output": self.output.weights.tolist(),
            "bias_output": self.output.biases.tolist(),
        }


@dataclass(frozen=True)
class ForwardCache:
    """Intermediate values captured during the forward pass of one sample."""

    inputs: Vector
    hidden_logits: Vector
    hidden_activations: Vector
    logit: float


@dataclass
class Gradients:
    """Gradients shaped like :class:`NetworkParameters`."""

    hidden: LayerParameters
    output: LayerParameters

    @classmethod
    def zeros_like(cls, params: NetworkParameters) -> "Gradients":
        return cls(
            hidden=LayerParameters(
                weights=np.zeros_like(params.hidden.weights),
                biases=np.zeros_like(params.hidden.biases),
            ),
            output=LayerParameters(
                weights=np.zeros_like(params.output.weights),
                biases=np.zeros_like(params.output.biases),
            ),
        )


@dataclass(frozen=True)
class SamplePrediction:
    """Forward-pass outcome for one sample, reported back after an epoch."""

    inputs: Vector
    probability: float
    logit: float
    target: float


@dataclass(frozen=True)
class EpochResult:
    """Summary returned by :meth:`xornet.training.trainer.Trainer.train_epoch`."""

    epoch: int
    mean_loss: float
    predictions: List[SamplePrediction] = field(default_factory=list)


@dataclass(frozen=True)
class TrainingSummary:
    """Outcome of a complete :meth:`~xornet.training.trainer.Trainer.fit` call."""

    epochs: int
    final_loss: float
    best_loss: float
    best_loss_epoch: int


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`xornet.training.pipelines.run_pipeline`."""

    epochs: int
    final_loss: float
    best_loss: float
    best_loss_epoch: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
