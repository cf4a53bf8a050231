"""Core numerical primitives for xornet."""

from . import activations, errors, linalg, rng, types

__all__ = ["activations", "errors", "linalg", "rng", "types"]
