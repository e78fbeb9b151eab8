import math

import numpy as np
import pytest

from tetrascan.dsp.power import ByteMagnitudeEstimator, analyze, peak


@pytest.mark.parametrize(
    "samples",
    [
        [],
        [0],
        [1, 2, 3],
        list(range(256)),
        bytes([7] * 1000),
    ],
)
def test_analyze_preserves_length(samples) -> None:
    assert len(analyze(samples)) == len(samples)


def test_analyze_known_values() -> None:
    assert list(analyze([])) == []
    assert list(analyze([0])) == [0.0]
    assert analyze([100])[0] == pytest.approx(40.0)
    assert analyze([1])[0] == pytest.approx(0.0)


def test_analyze_accepts_raw_bytes_and_arrays() -> None:
    expected = [20.0 * math.log10(v) if v else 0.0 for v in (0, 10, 255)]
    assert np.allclose(analyze(b"\x00\x0a\xff"), expected)
    assert np.allclose(analyze(np.array([0, 10, 255], dtype=np.uint8)), expected)


def test_peak_of_empty_capture_is_none() -> None:
    assert peak(analyze([])) is None


def test_peak_returns_largest_estimate() -> None:
    estimates = analyze([3, 200, 0, 17])
    assert peak(estimates) == pytest.approx(20.0 * math.log10(200))


def test_byte_scale_never_reaches_default_threshold() -> None:
    # A full-scale byte tops out near 48.13, below the 49.0 default threshold.
    assert peak(analyze([255])) < 49.0


def test_estimator_wraps_analyze() -> None:
    estimator = ByteMagnitudeEstimator()
    samples = bytes([5, 50, 150])
    assert np.array_equal(estimator.estimate(samples), analyze(samples))
