"""Per-frequency capture, analysis and threshold evaluation."""

from __future__ import annotations

from typing import Optional, Tuple

from tetrascan.detection.types import DetectionEvent, ElapsedInterval, Measurement
from tetrascan.drivers.base import CaptureAdapter, capture_window
from tetrascan.dsp.power import ByteMagnitudeEstimator, PowerEstimator, peak
from tetrascan.io.config import ScanConfig
from tetrascan.util.logging import get_logger
from tetrascan.util.scan_logger import ScanLogger
from tetrascan.util.time import Clock, elapsed_seconds, elapsed_whole_seconds

logger = get_logger(__name__)


def to_event(measurement: Measurement, threshold: float) -> Optional[DetectionEvent]:
    """Return a detection event when the capture's peak is strictly above ``threshold``."""
    if measurement.peak is None or not measurement.peak > threshold:
        return None
    return DetectionEvent(
        frequency_hz=measurement.frequency_hz,
        peak=measurement.peak,
        sample_count=measurement.sample_count,
        interval=measurement.interval,
    )


class Sweeper:
    """Run one capture + analyze cycle per frequency."""

    def __init__(
        self,
        adapter: CaptureAdapter,
        config: ScanConfig,
        *,
        clock: Clock,
        estimator: Optional[PowerEstimator] = None,
        scan_logger: Optional[ScanLogger] = None,
    ) -> None:
        self.adapter = adapter
        self.config = config
        self.clock = clock
        self.estimator = estimator or ByteMagnitudeEstimator()
        self.scan_logger = scan_logger

    def measure(self, frequency_hz: int, sweep_start: float) -> Measurement:
        """Capture at ``frequency_hz`` and reduce the window to its peak.

        The interval is stamped from the elapsed time when the capture began,
        not from how long the capture actually took.
        """
        t = elapsed_whole_seconds(self.clock, sweep_start)
        began = self.clock.now()
        samples = capture_window(
            self.adapter,
            frequency_hz,
            sample_rate_hz=self.config.sample_rate_hz,
            gain=self.config.gain,
            capture_seconds=self.config.capture_seconds,
            clock=self.clock,
        )
        estimates = self.estimator.estimate(samples)
        measurement = Measurement(
            frequency_hz=int(frequency_hz),
            sample_count=int(len(samples)),
            peak=peak(estimates),
            interval=ElapsedInterval(t, t + self.config.interval_seconds),
        )
        duration_ms = int(elapsed_seconds(self.clock, began) * 1000)
        logger.debug(
            "captured %d samples, peak=%s",
            measurement.sample_count,
            "none" if measurement.peak is None else f"{measurement.peak:.2f}",
            extra={"frequency_hz": measurement.frequency_hz, "elapsed_s": t, "duration_ms": duration_ms},
        )
        if self.scan_logger:
            self.scan_logger.log(
                "capture",
                frequency_hz=measurement.frequency_hz,
                sample_count=measurement.sample_count,
                peak=measurement.peak,
                elapsed_s=t,
                duration_ms=duration_ms,
            )
        return measurement

    def evaluate(self, frequency_hz: int, sweep_start: float) -> Tuple[Measurement, Optional[DetectionEvent]]:
        """Measure, then apply the detection threshold."""
        measurement = self.measure(frequency_hz, sweep_start)
        return measurement, to_event(measurement, self.config.threshold)
