from typing import Any, Callable, Dict, List, Optional

import pytest

from tetrascan.drivers.base import CaptureAdapter, DeviceHandle, GainSettings, HandleState


class FakeClock:
    """Manually advanced clock; ``sleep`` advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.t = float(start)
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.t += seconds


class ScriptedAdapter(CaptureAdapter):
    """Capture adapter returning scripted byte buffers per frequency.

    ``script`` maps a frequency to either a list of buffers (one per visit,
    the last one repeating) or a callable ``visit -> buffer``. Each chunk read
    advances the clock by ``chunk_seconds``.
    """

    name = "scripted"

    def __init__(
        self,
        clock: FakeClock,
        script: Optional[Dict[int, Any]] = None,
        *,
        default: Any = b"\x01\x02\x03",
        chunk_seconds: float = 1.0,
        fail_on: Optional[int] = None,
    ) -> None:
        self.clock = clock
        self.script = script or {}
        self.default = default
        self.chunk_seconds = chunk_seconds
        self.fail_on = fail_on
        self.visits: Dict[int, int] = {}
        self.tuned: List[int] = []
        self.capture_starts: List[float] = []
        self.open_handles = 0
        self.max_open_handles = 0
        self.closed = 0
        self.gains: List[GainSettings] = []

    def _buffer_for(self, freq: int, visit: int) -> Any:
        entry = self.script.get(freq, self.default)
        if callable(entry):
            return entry(visit)
        if isinstance(entry, list):
            return entry[min(visit, len(entry) - 1)]
        return entry

    def _open(self) -> Any:
        self.open_handles += 1
        self.max_open_handles = max(self.max_open_handles, self.open_handles)
        return object()

    def _configure(self, handle: DeviceHandle, frequency_hz: int, sample_rate_hz: int, gain: GainSettings) -> None:
        self.tuned.append(frequency_hz)
        self.gains.append(gain)

    def _enter_receive(self, handle: DeviceHandle) -> None:
        freq = int(handle.frequency_hz)
        handle.extra["visit"] = self.visits.get(freq, 0)
        self.visits[freq] = handle.extra["visit"] + 1
        self.capture_starts.append(self.clock.now())

    def _receive(self, handle: DeviceHandle) -> Any:
        if self.fail_on is not None and handle.frequency_hz == self.fail_on:
            raise IOError("usb transfer failed")
        self.clock.advance(self.chunk_seconds)
        return self._buffer_for(int(handle.frequency_hz), handle.extra["visit"])

    def _close(self, handle: DeviceHandle, previous: HandleState) -> None:
        self.open_handles -= 1
        self.closed += 1


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_adapter(fake_clock: FakeClock) -> Callable[..., ScriptedAdapter]:
    def _make(script: Optional[Dict[int, Any]] = None, **kwargs: Any) -> ScriptedAdapter:
        return ScriptedAdapter(fake_clock, script, **kwargs)

    return _make
