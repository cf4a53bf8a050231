"""The fixed XOR truth table used as the training set."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..core.types import Sample


def _frozen(*values: float) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


XOR_SAMPLES: Tuple[Sample, ...] = (
    Sample(inputs=_frozen(0.0, 0.0), target=0.0),
    Sample(inputs=_frozen(1.0, 0.0), target=1.0),
    Sample(inputs=_frozen(0.0, 1.0), target=1.0),
    Sample(inputs=_frozen(1.0, 1.0), target=0.0),
)

INPUT_SIZE = 2
OUTPUT_SIZE = 1


def xor_dataset() -> Tuple[Sample, ...]:
    """Return the four XOR samples in their canonical order."""

    return XOR_SAMPLES


__all__ = ["XOR_SAMPLES", "INPUT_SIZE", "OUTPUT_SIZE", "xor_dataset"]
