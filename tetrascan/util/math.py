"""Numeric helper functions used across DSP logic."""

import numpy as np


def db20(x: np.ndarray) -> np.ndarray:
    """Return 20 * log10(x) for positive entries and 0.0 everywhere else."""
    x = np.asarray(x, dtype=np.float64)
    out = np.zeros(x.shape, dtype=np.float64)
    positive = x > 0
    out[positive] = 20.0 * np.log10(x[positive])
    return out
