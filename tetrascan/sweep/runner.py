"""High-level sweep runner implementing the instant and scheduled modes."""

from __future__ import annotations

import asyncio
from typing import Optional

from tetrascan.detection.engine import InstantAggregator, ScheduledAggregator, SweepResult
from tetrascan.drivers.base import CaptureAdapter
from tetrascan.drivers.rtlsdr import RtlSdrCaptureAdapter
from tetrascan.drivers.soapy import SoapyCaptureAdapter, parse_soapy_args
from tetrascan.dsp.power import PowerEstimator
from tetrascan.io.config import ScanConfig
from tetrascan.sweep.sweeper import Sweeper
from tetrascan.util.logging import get_logger
from tetrascan.util.scan_logger import ScanLogger
from tetrascan.util.time import Clock, MonotonicClock, elapsed_seconds

logger = get_logger(__name__)


def select_adapter(config: ScanConfig) -> CaptureAdapter:
    """Build the capture backend named by ``config.driver``."""
    soapy_args = parse_soapy_args(config.soapy_args)
    if config.driver == "rtlsdr_native":
        index = soapy_args.get("index")
        return RtlSdrCaptureAdapter(
            device_index=int(index) if index is not None else None,
            serial_number=soapy_args.get("serial"),
        )
    return SoapyCaptureAdapter(driver=config.driver, soapy_args=soapy_args)


class SweepRunner:
    """Drive capture -> analyze -> threshold -> aggregate for one run.

    Instant mode makes a single pass over the band. Scheduled mode counts
    down, then repeats passes until ``scan_duration`` seconds have elapsed,
    checking the budget before every pass and before every capture.
    """

    def __init__(
        self,
        config: ScanConfig,
        adapter: CaptureAdapter,
        *,
        clock: Optional[Clock] = None,
        estimator: Optional[PowerEstimator] = None,
        scan_logger: Optional[ScanLogger] = None,
    ) -> None:
        self.config = config
        self.clock = clock or MonotonicClock()
        self.scan_logger = scan_logger
        self.sweeper = Sweeper(adapter, config, clock=self.clock, estimator=estimator, scan_logger=scan_logger)
        self.passes = 0

    def _log(self, event: str, **fields) -> None:
        if self.scan_logger:
            self.scan_logger.log(event, **fields)

    async def run(self) -> SweepResult:
        self._log(
            "sweep_start",
            mode=self.config.mode,
            start_hz=self.config.band.start_hz,
            end_hz=self.config.band.end_hz,
            step_hz=self.config.band.step_hz,
            threshold=self.config.threshold,
            scan_duration=self.config.scan_duration,
            driver=self.config.driver,
        )
        if self.config.instant_scan:
            result = await self.run_instant()
        else:
            result = await self.run_scheduled()
        self._log("sweep_summary", mode=self.config.mode, passes=self.passes, records=len(result))
        return result

    async def run_instant(self) -> SweepResult:
        print("Running instant scan...", flush=True)
        aggregator = InstantAggregator()
        start = self.clock.now()
        self.passes = 1
        if self.scan_logger:
            self.scan_logger.start_pass(1)
        for freq in self.config.band:
            measurement, event = self.sweeper.evaluate(freq, start)
            mhz = freq / 1_000_000.0
            print(f"Scanning frequency: {mhz} MHz", flush=True)
            print(f"Received {measurement.sample_count} samples", flush=True)
            if measurement.peak is None:
                print("No signal detected.", flush=True)
            elif event is not None:
                print("Signal detected: true", flush=True)
                record_id = aggregator.add(event)
                self._log("detection", record_id=record_id, frequency_hz=freq, strength=event.peak)
            else:
                print(
                    f"Signal below threshold detected at {mhz} MHz with strength {measurement.peak:.2f} dB",
                    flush=True,
                )
        self._log("pass_complete", frequencies=self.config.band.count)
        logger.info("Instant scan finished with %d detection(s)", len(aggregator))
        return aggregator.finalize()

    async def countdown(self) -> None:
        for remaining in range(self.config.start_after_duration, 0, -1):
            print(f"Scan starts in {remaining} seconds", flush=True)
            await self.clock.sleep(1)

    def _budget_spent(self, start: float) -> bool:
        return elapsed_seconds(self.clock, start) >= self.config.scan_duration

    async def run_scheduled(self) -> SweepResult:
        await self.countdown()
        print(f"Starting scan for {self.config.scan_duration} seconds...", flush=True)
        aggregator = ScheduledAggregator(coalesce=self.config.coalesce_intervals)
        start = self.clock.now()
        self.passes = 0
        while not self._budget_spent(start):
            self.passes += 1
            if self.scan_logger:
                self.scan_logger.start_pass(self.passes)
            visited = 0
            for freq in self.config.band:
                if self._budget_spent(start):
                    break
                visited += 1
                _, event = self.sweeper.evaluate(freq, start)
                if event is not None:
                    record_id = aggregator.add(event)
                    self._log(
                        "detection",
                        record_id=record_id,
                        frequency_hz=freq,
                        strength=event.peak,
                        interval=str(event.interval),
                    )
            self._log("pass_complete", frequencies=visited)
            logger.debug(
                "pass %d visited %d frequencies",
                self.passes,
                visited,
                extra={"pass_index": self.passes, "elapsed_s": round(elapsed_seconds(self.clock, start), 3)},
            )
        logger.info(
            "Scheduled scan finished: %d pass(es), %d frequency record(s)",
            self.passes,
            len(aggregator),
            extra={"elapsed_s": round(elapsed_seconds(self.clock, start), 3)},
        )
        return aggregator.finalize()


def run_sweep(
    config: ScanConfig,
    adapter: CaptureAdapter,
    *,
    clock: Optional[Clock] = None,
    estimator: Optional[PowerEstimator] = None,
    scan_logger: Optional[ScanLogger] = None,
) -> SweepResult:
    """Run a full sweep to completion on a fresh event loop."""
    runner = SweepRunner(config, adapter, clock=clock, estimator=estimator, scan_logger=scan_logger)
    return asyncio.run(runner.run())
