"""Frequency plan helpers for sweep orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List


@dataclass(frozen=True)
class FrequencyBand:
    """Inclusive ``start_hz..end_hz`` span walked in ``step_hz`` increments."""

    start_hz: int
    end_hz: int
    step_hz: int

    def __post_init__(self) -> None:
        if self.step_hz <= 0:
            raise ValueError("step_hz must be positive")
        if self.end_hz < self.start_hz:
            raise ValueError("end_hz must be >= start_hz")

    def __iter__(self) -> Iterator[int]:
        freq = self.start_hz
        while freq <= self.end_hz:
            yield freq
            freq += self.step_hz

    def frequencies(self) -> List[int]:
        """Eagerly materialize the frequency plan."""

        return list(iter(self))

    @property
    def count(self) -> int:
        """Return the number of frequencies visited per pass."""

        return (self.end_hz - self.start_hz) // self.step_hz + 1

    def describe(self) -> str:
        return f"{self.start_hz / 1e6:.3f}-{self.end_hz / 1e6:.3f} MHz step {self.step_hz / 1e3:.0f} kHz"
