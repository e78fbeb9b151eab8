"""Capture adapter contract and device handle state machine.

A handle moves IDLE -> CONFIGURED -> RECEIVING -> CLOSED. The public
adapter methods check the handle's state before delegating to the
driver-specific ``_open``/``_configure``/``_enter_receive``/``_receive``/
``_close`` hooks, and convert driver exceptions into the matching
``HardwareError`` subclass.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from tetrascan.dsp.power import as_sample_buffer
from tetrascan.errors import (
    CaptureError,
    HandleStateError,
    HardwareConfigureError,
    HardwareError,
    HardwareOpenError,
)
from tetrascan.util.logging import get_logger
from tetrascan.util.time import Clock, elapsed_seconds

logger = get_logger(__name__)


class HandleState(enum.Enum):
    IDLE = "idle"
    CONFIGURED = "configured"
    RECEIVING = "receiving"
    CLOSED = "closed"


@dataclass(frozen=True)
class GainSettings:
    amp_enabled: bool = True
    lna_db: float = 24.0
    vga_db: float = 28.0


@dataclass
class DeviceHandle:
    """Opaque per-capture device handle carrying its lifecycle state."""

    device: Any
    state: HandleState = HandleState.IDLE
    frequency_hz: Optional[int] = None
    sample_rate_hz: Optional[int] = None
    stream: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def require(self, operation: str, *allowed: HandleState) -> None:
        if self.state not in allowed:
            expected = "/".join(s.value for s in allowed)
            raise HandleStateError(
                f"cannot {operation} a device handle in state '{self.state.value}'",
                context={"expected": expected},
            )


class CaptureAdapter:
    """Base class for SDR capture backends."""

    name = "base"

    def open(self) -> DeviceHandle:
        try:
            device = self._open()
        except HardwareError:
            raise
        except Exception as exc:
            raise HardwareOpenError(f"failed to open {self.name} device: {exc}") from exc
        return DeviceHandle(device=device)

    def configure(self, handle: DeviceHandle, frequency_hz: int, sample_rate_hz: int, gain: GainSettings) -> None:
        handle.require("configure", HandleState.IDLE, HandleState.CONFIGURED)
        try:
            self._configure(handle, int(frequency_hz), int(sample_rate_hz), gain)
        except HardwareError:
            raise
        except Exception as exc:
            raise HardwareConfigureError(
                f"failed to configure {self.name} device: {exc}",
                context={"frequency_hz": int(frequency_hz), "sample_rate_hz": int(sample_rate_hz)},
            ) from exc
        handle.frequency_hz = int(frequency_hz)
        handle.sample_rate_hz = int(sample_rate_hz)
        handle.state = HandleState.CONFIGURED

    def enter_receive_mode(self, handle: DeviceHandle) -> DeviceHandle:
        handle.require("enter receive mode on", HandleState.CONFIGURED)
        try:
            self._enter_receive(handle)
        except HardwareError:
            raise
        except Exception as exc:
            raise HardwareConfigureError(
                f"failed to enter RX mode on {self.name} device: {exc}",
                context={"frequency_hz": handle.frequency_hz},
            ) from exc
        handle.state = HandleState.RECEIVING
        return handle

    def receive_chunk(self, handle: DeviceHandle) -> np.ndarray:
        handle.require("receive from", HandleState.RECEIVING)
        try:
            chunk = self._receive(handle)
        except HardwareError:
            raise
        except Exception as exc:
            raise CaptureError(
                f"failed to receive samples from {self.name} device: {exc}",
                context={"frequency_hz": handle.frequency_hz},
            ) from exc
        return as_sample_buffer(chunk)

    def close(self, handle: DeviceHandle) -> None:
        if handle.state is HandleState.CLOSED:
            return
        previous = handle.state
        handle.state = HandleState.CLOSED
        try:
            self._close(handle, previous)
        except Exception as exc:
            raise HardwareError(
                f"failed to close {self.name} device: {exc}",
                context={"frequency_hz": handle.frequency_hz, "state": previous.value},
            ) from exc

    def _open(self) -> Any:
        raise NotImplementedError

    def _configure(self, handle: DeviceHandle, frequency_hz: int, sample_rate_hz: int, gain: GainSettings) -> None:
        raise NotImplementedError

    def _enter_receive(self, handle: DeviceHandle) -> None:
        raise NotImplementedError

    def _receive(self, handle: DeviceHandle) -> Any:
        raise NotImplementedError

    def _close(self, handle: DeviceHandle, previous: HandleState) -> None:
        pass


def capture_window(
    adapter: CaptureAdapter,
    frequency_hz: int,
    *,
    sample_rate_hz: int,
    gain: GainSettings,
    capture_seconds: float,
    clock: Clock,
) -> np.ndarray:
    """Tune, receive chunks until ``capture_seconds`` elapse, and close.

    At least one chunk is always read. Errors propagate unchanged after the
    handle has been closed; a close failure is only raised when the capture
    itself succeeded.
    """
    handle = adapter.open()
    try:
        adapter.configure(handle, frequency_hz, sample_rate_hz, gain)
        adapter.enter_receive_mode(handle)
        start = clock.now()
        chunks: List[np.ndarray] = []
        while True:
            chunks.append(adapter.receive_chunk(handle))
            if elapsed_seconds(clock, start) >= capture_seconds:
                break
    except BaseException:
        try:
            adapter.close(handle)
        except HardwareError as close_exc:
            logger.warning(
                "Ignoring close failure after aborted capture: %s",
                close_exc,
                extra={"frequency_hz": frequency_hz},
            )
        raise
    adapter.close(handle)
    return np.concatenate(chunks)
