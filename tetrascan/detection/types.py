"""Dataclasses shared across the sweeper, aggregators and exporter."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ElapsedInterval:
    """Half-open ``[start, end)`` window in whole seconds since sweep start."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class Measurement:
    """Outcome of one capture + analyze cycle, qualifying or not."""

    frequency_hz: int
    sample_count: int
    peak: Optional[float]
    interval: ElapsedInterval


@dataclass(frozen=True)
class DetectionEvent:
    frequency_hz: int
    peak: float
    sample_count: int
    interval: ElapsedInterval


@dataclass
class Detection:
    frequency_hz: int
    strength: float
    sample_count: int
    intervals: List[ElapsedInterval] = field(default_factory=list)

    @property
    def freq_mhz(self) -> float:
        return self.frequency_hz / 1_000_000.0


def coalesce_intervals(intervals: List[ElapsedInterval]) -> List[ElapsedInterval]:
    """Merge overlapping or touching intervals; the input list is not modified."""
    merged: List[ElapsedInterval] = []
    for iv in sorted(intervals, key=lambda i: (i.start, i.end)):
        if merged and iv.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = ElapsedInterval(last.start, max(last.end, iv.end))
        else:
            merged.append(iv)
    return merged


def format_intervals(intervals: List[ElapsedInterval]) -> str:
    return ",".join(str(iv) for iv in intervals)
