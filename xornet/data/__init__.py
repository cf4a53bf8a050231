"""Training data for xornet."""

from .xor import INPUT_SIZE, OUTPUT_SIZE, XOR_SAMPLES, xor_dataset

__all__ = ["INPUT_SIZE", "OUTPUT_SIZE", "XOR_SAMPLES", "xor_dataset"]
