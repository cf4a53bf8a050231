"""Full-batch gradient descent for the two-layer XOR network."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

import numpy as np

from ..core import linalg
from ..core.activations import sigmoid, tanh, tanh_derivative, weights_gradient, xavier_limit
from ..core.errors import (
    InitializationOrderError,
    InvalidConfigurationError,
    UninitializedSourceError,
)
from ..core.rng import RandomSource
from ..core.types import (
    EpochResult,
    ForwardCache,
    Gradients,
    LayerParameters,
    NetworkParameters,
    Sample,
    SamplePrediction,
    TrainingSummary,
)
from ..data.xor import INPUT_SIZE, OUTPUT_SIZE, XOR_SAMPLES
from .losses import REGISTRY as LOSS_REGISTRY
from .losses import Loss

OUTPUT_INIT_MODES = ("output", "hidden")


def require_positive(name: str, value: float) -> None:
    if not value > 0:
        raise InvalidConfigurationError(f"{name} must be positive, got {value!r}")


# ----------------------------------------------------------------------
# Per-layer forward/backward functions


def forward(params: NetworkParameters, inputs) -> ForwardCache:
    """Run one sample through the network and keep what backprop needs."""

    x = linalg.as_vector(inputs)
    hidden_logits = linalg.add(linalg.mat_vec_mul(params.hidden.weights, x), params.hidden.biases)
    hidden_activations = np.asarray(tanh(hidden_logits))
    output_logits = linalg.add(
        linalg.mat_vec_mul(params.output.weights, hidden_activations), params.output.biases
    )
    return ForwardCache(
        inputs=x,
        hidden_logits=hidden_logits,
        hidden_activations=hidden_activations,
        logit=float(output_logits[0]),
    )


def output_layer_gradients(hidden_activations, delta_output: float) -> LayerParameters:
    return LayerParameters(
        weights=linalg.scale(hidden_activations, delta_output).reshape(1, -1),
        biases=np.array([delta_output], dtype=np.float64),
    )


def hidden_layer_gradients(
    output: LayerParameters, hidden_logits, inputs, delta_output: float
) -> LayerParameters:
    delta_hidden = linalg.mul(
        linalg.scale(output.weights[0], delta_output), tanh_derivative(hidden_logits)
    )
    return LayerParameters(
        weights=weights_gradient(delta_hidden, inputs),
        biases=delta_hidden,
    )


def backward(params: NetworkParameters, cache: ForwardCache, delta_output: float) -> Gradients:
    """Return fresh gradients for one sample given dL/dlogit of the output unit."""

    return Gradients(
        hidden=hidden_layer_gradients(
            params.output, cache.hidden_logits, cache.inputs, delta_output
        ),
        output=output_layer_gradients(cache.hidden_activations, delta_output),
    )


def sample_loss_and_gradients(
    params: NetworkParameters, sample: Sample, loss_fn: Loss
) -> tuple[float, Gradients, ForwardCache]:
    cache = forward(params, sample.inputs)
    loss, delta = loss_fn(cache.logit, sample.target)
    return loss, backward(params, cache, delta), cache


def accumulate(acc: Gradients, grads: Gradients) -> Gradients:
    return Gradients(
        hidden=LayerParameters(
            weights=linalg.mat_add(acc.hidden.weights, grads.hidden.weights),
            biases=linalg.add(acc.hidden.biases, grads.hidden.biases),
        ),
        output=LayerParameters(
            weights=linalg.mat_add(acc.output.weights, grads.output.weights),
            biases=linalg.add(acc.output.biases, grads.output.biases),
        ),
    )


# ----------------------------------------------------------------------
# Model and optimiser


@dataclass
class XorNetwork:
    """Input -> tanh hidden layer -> single logit output."""

    hidden_size: int
    input_size: int = INPUT_SIZE
    output_size: int = OUTPUT_SIZE
    output_init: str = "output"
    params: NetworkParameters | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        require_positive("hidden_size", self.hidden_size)
        if self.output_init not in OUTPUT_INIT_MODES:
            raise InvalidConfigurationError(
                f"output_init must be one of {OUTPUT_INIT_MODES}, got {self.output_init!r}"
            )

    def init_bounds(self) -> tuple[float, float]:
        hidden_bound = xavier_limit(self.input_size, self.hidden_size)
        if self.output_init == "hidden":
            return hidden_bound, hidden_bound
        return hidden_bound, xavier_limit(self.hidden_size, self.output_size)

    def reset(self, source: RandomSource) -> None:
        hidden_bound, output_bound = self.init_bounds()
        hidden_w = source.sample_matrix(
            self.hidden_size, self.input_size, -hidden_bound, hidden_bound
        )
        output_w = source.sample_matrix(
            self.output_size, self.hidden_size, -output_bound, output_bound
        )
        self.params = NetworkParameters(
            hidden=LayerParameters(weights=hidden_w, biases=np.zeros(self.hidden_size)),
            output=LayerParameters(weights=output_w, biases=np.zeros(self.output_size)),
        )

    def forward(self, inputs) -> ForwardCache:
        return forward(self.require_params(), inputs)

    def apply_update(self, update: Gradients) -> None:
        """Subtract ``update`` from the parameters in place."""

        params = self.require_params()
        params.hidden.weights = linalg.mat_sub(params.hidden.weights, update.hidden.weights)
        params.hidden.biases = linalg.sub(params.hidden.biases, update.hidden.biases)
        params.output.weights = linalg.mat_sub(params.output.weights, update.output.weights)
        params.output.biases = linalg.sub(params.output.biases, update.output.biases)

    def parameter_count(self) -> int:
        return self.hidden_size * (self.input_size + 1) + self.output_size * (self.hidden_size + 1)

    def require_params(self) -> NetworkParameters:
        if self.params is None:
            raise UninitializedSourceError(
                "Network parameters aren't drawn yet! Call Trainer.initialize(seed) first"
            )
        return self.params


@dataclass
class SGDOptimizer:
    """Plain gradient descent on the mean of accumulated gradients."""

    lr: float

    def __post_init__(self) -> None:
        require_positive("lr", self.lr)

    def step(self, model: XorNetwork, acc: Gradients, sample_count: int) -> None:
        """Apply ``param -= lr * (acc / sample_count)`` to every parameter."""

        factor = 1.0 / sample_count
        model.apply_update(
            Gradients(
                hidden=LayerParameters(
                    weights=linalg.mat_scale(linalg.mat_scale(acc.hidden.weights, factor), self.lr),
                    biases=linalg.scale(linalg.scale(acc.hidden.biases, factor), self.lr),
                ),
                output=LayerParameters(
                    weights=linalg.mat_scale(linalg.mat_scale(acc.output.weights, factor), self.lr),
                    biases=linalg.scale(linalg.scale(acc.output.biases, factor), self.lr),
                ),
            )
        )


# ----------------------------------------------------------------------
# Engine


class Trainer:
    """Owns the network, its random source and the epoch loop."""

    def __init__(
        self,
        hidden_size: int,
        lr: float,
        *,
        loss: str = "bcewithlogits",
        output_init: str = "output",
        samples: Sequence[Sample] = XOR_SAMPLES,
        source: RandomSource | None = None,
    ) -> None:
        if not samples:
            raise InvalidConfigurationError("Training set must contain at least one sample")
        self.model = XorNetwork(hidden_size=int(hidden_size), output_init=output_init)
        self.optimizer = SGDOptimizer(lr=float(lr))
        self.loss_fn = LOSS_REGISTRY.resolve(loss)
        self.samples = tuple(samples)
        self.source = source or RandomSource()
        self._seed: int | None = None
        self._epoch = 0
        self._best_loss = float("inf")
        self._best_loss_epoch = 0

    # ------------------------------------------------------------------
    # Lifecycle

    def initialize(self, seed: int) -> None:
        """Seed the random source and draw the initial parameters.

        Calling again with the same seed does nothing; a different seed is an
        attempt to reseed and is rejected.  A source handed in already seeded
        must carry the same seed.
        """

        seed = int(seed)
        if self.model.params is not None:
            if self._seed == seed:
                return
            raise InitializationOrderError(
                f"Trainer already initialized with seed {self._seed}; "
                f"refusing to reseed with {seed}"
            )
        if self.source.is_initialized and self.source.seed != seed:
            raise InitializationOrderError(
                f"Random source already seeded with {self.source.seed}; "
                f"cannot initialize with {seed}"
            )
        self.source.init(seed)
        self.model.reset(self.source)
        self._seed = seed

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def best_loss(self) -> float:
        return self._best_loss

    @property
    def best_loss_epoch(self) -> int:
        return self._best_loss_epoch

    # ------------------------------------------------------------------
    # Training

    def train_epoch(self) -> EpochResult:
        params = self.model.require_params()
        acc = Gradients.zeros_like(params)
        total_loss = 0.0
        predictions: list[SamplePrediction] = []

        for sample in self.samples:
            loss, grads, cache = sample_loss_and_gradients(params, sample, self.loss_fn)
            acc = accumulate(acc, grads)
            total_loss += loss
            predictions.append(
                SamplePrediction(
                    inputs=sample.inputs,
                    probability=sigmoid(cache.logit),
                    logit=cache.logit,
                    target=sample.target,
                )
            )

        self.optimizer.step(self.model, acc, len(self.samples))
        self._epoch += 1

        mean_loss = total_loss / len(self.samples)
        if mean_loss < self._best_loss:
            self._best_loss = mean_loss
            self._best_loss_epoch = self._epoch
        return EpochResult(epoch=self._epoch, mean_loss=mean_loss, predictions=predictions)

    def fit(self, epochs: int, callbacks: Sequence[object] | None = None) -> TrainingSummary:
        """Run ``epochs`` epochs, notifying ``callbacks`` after each one."""

        epochs = int(epochs)
        require_positive("epochs", epochs)
        callbacks = list(callbacks or [])
        result = self.train_epoch()
        self._emit_epoch(result, callbacks)
        for _ in range(epochs - 1):
            result = self.train_epoch()
            self._emit_epoch(result, callbacks)
        for callback in callbacks:
            if hasattr(callback, "on_train_end"):
                callback.on_train_end(self)  # type: ignore[attr-defined]
        return TrainingSummary(
            epochs=self._epoch,
            final_loss=result.mean_loss,
            best_loss=self._best_loss,
            best_loss_epoch=self._best_loss_epoch,
        )

    def predict(self, inputs) -> float:
        """Return the probability the network assigns to ``inputs``."""

        return sigmoid(self.model.forward(inputs).logit)

    def current_parameters(self) -> NetworkParameters:
        return self.model.require_params().copy()

    # ------------------------------------------------------------------
    # Internal helpers

    def _epoch_metrics(self, result: EpochResult) -> Mapping[str, float]:
        correct = [
            (pred.probability >= 0.5) == (pred.target >= 0.5) for pred in result.predictions
        ]
        return {
            "loss": result.mean_loss,
            "best_loss": self._best_loss,
            "accuracy": float(np.mean(correct)) if correct else 0.0,
        }

    def _emit_epoch(self, result: EpochResult, callbacks: Sequence[object]) -> None:
        metrics = self._epoch_metrics(result)
        for callback in callbacks:
            if hasattr(callback, "on_epoch_result"):
                callback.on_epoch_result(result)  # type: ignore[attr-defined]
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(result.epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(result.epoch, metrics)


__all__ = [
    "OUTPUT_INIT_MODES",
    "Trainer",
    "XorNetwork",
    "SGDOptimizer",
    "forward",
    "backward",
    "output_layer_gradients",
    "hidden_layer_gradients",
    "sample_loss_and_gradients",
    "accumulate",
    "require_positive",
]
