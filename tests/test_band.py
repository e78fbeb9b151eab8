import pytest

from tetrascan.io.config import DEFAULT_BAND
from tetrascan.sweep.scheduler import FrequencyBand


def test_band_iteration_includes_both_ends() -> None:
    band = FrequencyBand(100, 130, 10)
    assert band.frequencies() == [100, 110, 120, 130]
    assert band.count == 4


def test_band_stops_before_overshooting_end() -> None:
    band = FrequencyBand(100, 125, 10)
    assert band.frequencies() == [100, 110, 120]
    assert band.count == 3


def test_single_frequency_band() -> None:
    assert FrequencyBand(5, 5, 1).frequencies() == [5]


def test_default_band_covers_tetra_grid() -> None:
    freqs = DEFAULT_BAND.frequencies()
    assert freqs[0] == 380_000_000
    assert freqs[-1] == 420_000_000
    assert len(freqs) == DEFAULT_BAND.count == 41


@pytest.mark.parametrize("start,end,step", [(0, 10, 0), (0, 10, -1), (10, 0, 1)])
def test_band_rejects_invalid_spans(start: int, end: int, step: int) -> None:
    with pytest.raises(ValueError):
        FrequencyBand(start, end, step)
