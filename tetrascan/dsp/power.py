"""Per-sample power estimation for captured sample buffers.

Each raw byte is treated as an independent linear magnitude and mapped to
``20 * log10(v)`` (``0.0`` for zero bytes). The values live on the
analyzer's own uncalibrated scale; they are not dBm.

HackRF/RTL-SDR class receivers emit interleaved I/Q byte pairs, so reading
every byte as a magnitude ignores the pairing. Callers depend only on
``PowerEstimator`` so a different estimator can be plugged into the sweeper.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

from tetrascan.util.math import db20

SampleInput = Union[np.ndarray, bytes, bytearray, Sequence[int]]


def as_sample_buffer(samples: SampleInput) -> np.ndarray:
    """Coerce driver output into a flat ``uint8`` array."""
    if isinstance(samples, np.ndarray):
        return samples.astype(np.uint8, copy=False).ravel()
    if isinstance(samples, (bytes, bytearray, memoryview)):
        return np.frombuffer(bytes(samples), dtype=np.uint8)
    return np.asarray(list(samples), dtype=np.uint8)


def analyze(samples: SampleInput) -> np.ndarray:
    """Map a sample buffer to one float64 power estimate per sample."""
    return db20(as_sample_buffer(samples))


def peak(estimates: np.ndarray) -> Optional[float]:
    """Largest estimate, or ``None`` for an empty capture."""
    if len(estimates) == 0:
        return None
    return float(np.max(estimates))


class PowerEstimator:
    """Interface for turning a sample buffer into per-sample estimates."""

    name = "base"

    def estimate(self, samples: SampleInput) -> np.ndarray:
        raise NotImplementedError


class ByteMagnitudeEstimator(PowerEstimator):
    """Default estimator: ``analyze`` applied to every raw byte."""

    name = "byte_magnitude"

    def estimate(self, samples: SampleInput) -> np.ndarray:
        return analyze(samples)
