"""Training loop, losses and pipeline assembly for xornet."""
