"""Seed-once uniform random source used for parameter initialisation."""

from __future__ import annotations

import threading

import numpy as np

from .errors import UninitializedSourceError
from .types import Matrix

SEED_MASK = 0xFFFFFFFF


class RandomSource:
    """Uniform ``float64`` generator that can be seeded exactly once.

    ``init`` is idempotent: the first seed wins and later calls are ignored,
    including concurrent first calls from several threads.  ``sample`` refuses
    to run before ``init``.  A fixed seed always yields the same sequence.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rng: np.random.Generator | None = None
        self._seed: int | None = None

    def init(self, seed: int) -> None:
        """Seed the generator; any integer is accepted.

        Negative and oversized seeds are reduced to 32 bits before they reach
        numpy, so ``-1`` and ``2**32 - 1`` share a stream.  ``seed`` still
        reports the value the caller passed.
        """

        with self._lock:
            if self._rng is not None:
                return
            requested = int(seed)
            self._rng = np.random.default_rng(requested & SEED_MASK)
            self._seed = requested

    @property
    def is_initialized(self) -> bool:
        return self._rng is not None

    @property
    def seed(self) -> int | None:
        return self._seed

    def sample(self, low: float, high: float) -> float:
        """Return a uniformly distributed double in ``[low, high]``."""

        if self._rng is None:
            raise UninitializedSourceError(
                "Random source isn't initialized! Call init(seed) first"
            )
        return float(self._rng.uniform(low, high))

    def sample_matrix(self, rows: int, cols: int, low: float, high: float) -> Matrix:
        """Fill a ``rows x cols`` matrix row-major with successive samples."""

        out = np.empty((rows, cols), dtype=np.float64)
        for i in range(rows):
            for j in range(cols):
                out[i, j] = self.sample(low, high)
        return out


__all__ = ["RandomSource", "SEED_MASK"]
