"""xornet public API."""

from .core import activations  # noqa: F401
from .core import linalg  # noqa: F401
from .core.errors import (
    InitializationOrderError,
    InvalidConfigurationError,
    ShapeMismatchError,
    UninitializedSourceError,
)
from .core.rng import RandomSource
from .data import XOR_SAMPLES
from .training.pipelines import TrainConfig, load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "Trainer",
    "RandomSource",
    "TrainConfig",
    "XOR_SAMPLES",
    "activations",
    "linalg",
    "load_preset",
    "presets",
    "run_pipeline",
    "ShapeMismatchError",
    "InitializationOrderError",
    "UninitializedSourceError",
    "InvalidConfigurationError",
]
