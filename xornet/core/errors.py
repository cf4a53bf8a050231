"""Error taxonomy shared by the xornet engine."""

from __future__ import annotations


class ShapeMismatchError(ValueError):
    """Operands have incompatible vector or matrix dimensions."""


class InitializationOrderError(RuntimeError):
    """An operation was called before (or instead of) the required setup step."""


class UninitializedSourceError(InitializationOrderError):
    """A :class:`~xornet.core.rng.RandomSource` was sampled before ``init``."""


class InvalidConfigurationError(ValueError):
    """Training configuration rejected before any epoch runs."""


__all__ = [
    "ShapeMismatchError",
    "InitializationOrderError",
    "UninitializedSourceError",
    "InvalidConfigurationError",
]
