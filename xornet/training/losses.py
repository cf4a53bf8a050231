"""Binary cross-entropy losses and the registry the trainer resolves them from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from ..core.activations import EPS, sigmoid
from ..core.errors import InvalidConfigurationError

LossFn = Callable[[float, float], tuple[float, float]]


def bce(target, pred):
    """Binary cross-entropy of a probability ``pred`` against ``target``.

    ``pred`` is clamped to ``[EPS, 1 - EPS]`` so the logarithms stay finite.
    """

    p = np.clip(np.asarray(pred, dtype=np.float64), EPS, 1.0 - EPS)
    t = np.asarray(target, dtype=np.float64)
    loss = -(t * np.log(p) + (1.0 - t) * np.log(1.0 - p))
    return float(loss) if loss.ndim == 0 else loss


def bce_delta(target, pred):
    """Gradient of :func:`bce` w.r.t. the logit when ``pred`` is a sigmoid output."""

    delta = np.asarray(pred, dtype=np.float64) - np.asarray(target, dtype=np.float64)
    return float(delta) if delta.ndim == 0 else delta


def bce_with_logits(logit, target):
    """Numerically stable ``bce(target, sigmoid(logit))``.

    Uses ``max(z, 0) - z * t + log(1 + e^-|z|)`` which never evaluates
    ``e^z`` for large positive ``z``.
    """

    z = np.asarray(logit, dtype=np.float64)
    t = np.asarray(target, dtype=np.float64)
    loss = np.maximum(z, 0.0) - z * t + np.log1p(np.exp(-np.abs(z)))
    return float(loss) if loss.ndim == 0 else loss


def bce_with_logits_delta(logit, target):
    """Closed-form gradient of :func:`bce_with_logits` w.r.t. the logit."""

    delta = np.asarray(sigmoid(logit)) - np.asarray(target, dtype=np.float64)
    return float(delta) if delta.ndim == 0 else delta


@dataclass(frozen=True)
class Loss:
    """Loss wrapper returning both the scalar loss and dL/dlogit."""

    name: str
    fn: LossFn

    def __call__(self, logit: float, target: float) -> tuple[float, float]:
        return self.fn(logit, target)


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Loss] = {}

    def register(self, name: str, fn: LossFn) -> None:
        self._registry[name] = Loss(name, fn)

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def resolve(self, name: str) -> Loss:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise InvalidConfigurationError(
                f"Unknown loss {name!r}. Available losses: {available}"
            )
        return self._registry[name]


REGISTRY = LossRegistry()


def _bce_on_probability(logit: float, target: float) -> tuple[float, float]:
    pred = sigmoid(logit)
    return bce(target, pred), bce_delta(target, pred)


def _bce_fused(logit: float, target: float) -> tuple[float, float]:
    return bce_with_logits(logit, target), bce_with_logits_delta(logit, target)


REGISTRY.register("bce", _bce_on_probability)
REGISTRY.register("bcewithlogits", _bce_fused)
# Alias for parity with the function name
REGISTRY.register("bce_with_logits", _bce_fused)

__all__ = [
    "Loss",
    "LossRegistry",
    "REGISTRY",
    "bce",
    "bce_delta",
    "bce_with_logits",
    "bce_with_logits_delta",
]
