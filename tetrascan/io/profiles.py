"""Named band presets and helpers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from tetrascan.sweep.scheduler import FrequencyBand


@dataclass
class BandProfile:
    name: str
    start_hz: int
    end_hz: int
    step_hz: int
    notes: str = ""
    sample_rate_hz: Optional[int] = None
    threshold: Optional[float] = None

    def band(self) -> FrequencyBand:
        return FrequencyBand(self.start_hz, self.end_hz, self.step_hz)


def default_band_profiles() -> Dict[str, BandProfile]:
    profiles = [
        BandProfile(
            name="tetra",
            start_hz=380_000_000,
            end_hz=420_000_000,
            step_hz=1_000_000,
            notes="TETRA public-safety and civil allocations, coarse 1 MHz grid",
        ),
        BandProfile(
            name="tetra_emergency",
            start_hz=380_000_000,
            end_hz=400_000_000,
            step_hz=500_000,
            notes="380-400 MHz emergency services block",
        ),
        BandProfile(
            name="tetra_civil",
            start_hz=410_000_000,
            end_hz=430_000_000,
            step_hz=500_000,
            notes="410-430 MHz civil TETRA block",
        ),
        BandProfile(
            name="pmr446",
            start_hz=446_000_000,
            end_hz=446_200_000,
            step_hz=12_500,
            notes="PMR446 licence-free channels",
            sample_rate_hz=2_000_000,
        ),
    ]
    return {p.name: p for p in profiles}


def get_profile(name: str) -> Optional[BandProfile]:
    return default_band_profiles().get(str(name).lower())


def serialize_profiles() -> Dict[str, Any]:
    return {name: asdict(profile) for name, profile in default_band_profiles().items()}
