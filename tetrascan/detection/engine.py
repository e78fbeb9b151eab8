"""Detection aggregators turning qualifying events into exportable records."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from tetrascan.detection.types import (
    Detection,
    DetectionEvent,
    coalesce_intervals,
    format_intervals,
)
from tetrascan.util.logging import get_logger

logger = get_logger(__name__)

SweepResult = Dict[str, Dict[str, Any]]

EMPTY_INSTANT_RECORD: Dict[str, Any] = {"freq": 0, "max_strength": 0, "sample_count": 0}


class InstantAggregator:
    """One record per qualifying capture, keyed by a counter starting at 1.

    A single pass visits each frequency once, so nothing is merged.
    """

    first_id = 1

    def __init__(self) -> None:
        self._records: List[Detection] = []

    def __len__(self) -> int:
        return len(self._records)

    def add(self, event: DetectionEvent) -> str:
        self._records.append(
            Detection(
                frequency_hz=event.frequency_hz,
                strength=event.peak,
                sample_count=event.sample_count,
                intervals=[event.interval],
            )
        )
        record_id = str(self.first_id + len(self._records) - 1)
        logger.debug("instant record %s created", record_id, extra={"frequency_hz": event.frequency_hz})
        return record_id

    def finalize(self) -> SweepResult:
        if not self._records:
            return {str(self.first_id): dict(EMPTY_INSTANT_RECORD)}
        result: SweepResult = {}
        for offset, det in enumerate(self._records):
            result[str(self.first_id + offset)] = {
                "freq": det.freq_mhz,
                "strength": det.strength,
                "sample_count": det.sample_count,
            }
        return result


class ScheduledAggregator:
    """Merge repeated detections of the same frequency across passes.

    Records are indexed in first-seen order. A repeat detection overwrites
    strength and sample_count and appends its interval; intervals are never
    deduplicated. With ``coalesce=True`` only the exported text is merged.
    """

    first_id = 0

    def __init__(self, *, coalesce: bool = False) -> None:
        self.coalesce = bool(coalesce)
        self._index_by_freq: Dict[int, int] = {}
        self._records: List[Detection] = []

    def __len__(self) -> int:
        return len(self._records)

    def get(self, frequency_hz: int) -> Optional[Detection]:
        idx = self._index_by_freq.get(frequency_hz)
        return None if idx is None else self._records[idx]

    def add(self, event: DetectionEvent) -> str:
        idx = self._index_by_freq.get(event.frequency_hz)
        if idx is None:
            idx = len(self._records)
            self._index_by_freq[event.frequency_hz] = idx
            self._records.append(
                Detection(
                    frequency_hz=event.frequency_hz,
                    strength=event.peak,
                    sample_count=event.sample_count,
                    intervals=[event.interval],
                )
            )
            logger.debug("scheduled record %d created", idx, extra={"frequency_hz": event.frequency_hz})
        else:
            det = self._records[idx]
            det.strength = event.peak
            det.sample_count = event.sample_count
            det.intervals.append(event.interval)
        return str(self.first_id + idx)

    def durations_text(self, det: Detection) -> str:
        intervals = coalesce_intervals(det.intervals) if self.coalesce else det.intervals
        return format_intervals(intervals)

    def finalize(self) -> SweepResult:
        result: SweepResult = {}
        for idx, det in enumerate(self._records):
            result[str(self.first_id + idx)] = {
                "freq": det.freq_mhz,
                "strength": det.strength,
                "sample_count": det.sample_count,
                "tetra_durations": self.durations_text(det),
            }
        return result
