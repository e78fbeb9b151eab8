"""Native librtlsdr (pyrtlsdr) capture adapter."""

from __future__ import annotations

from typing import Any, Optional

from tetrascan.drivers.base import CaptureAdapter, DeviceHandle, GainSettings, HandleState
from tetrascan.errors import HardwareOpenError

try:  # pragma: no cover - optional dependency
    from rtlsdr import RtlSdr  # type: ignore

    HAVE_RTLSDR = True
except Exception:  # pragma: no cover - optional dependency
    HAVE_RTLSDR = False
    RtlSdr = None  # type: ignore


class RtlSdrCaptureAdapter(CaptureAdapter):
    """Raw unsigned I/Q bytes from an RTL-SDR dongle.

    The tuner has a single gain stage, so the LNA and VGA settings are summed
    and librtlsdr snaps the result to the nearest supported step.
    """

    name = "rtlsdr_native"

    def __init__(self, *, device_index: Optional[int] = None, serial_number: Optional[str] = None, chunk_bytes: int = 262144):
        if not HAVE_RTLSDR:
            raise HardwareOpenError("pyrtlsdr not available", context={"driver": self.name})
        self.device_index = device_index
        self.serial_number = serial_number
        self.chunk_bytes = int(chunk_bytes)

    def _open(self) -> Any:
        if self.serial_number:
            return RtlSdr(serial_number=str(self.serial_number))  # type: ignore[misc]
        if self.device_index is not None:
            return RtlSdr(device_index=int(self.device_index))  # type: ignore[misc]
        return RtlSdr()  # type: ignore[misc]

    def _configure(self, handle: DeviceHandle, frequency_hz: int, sample_rate_hz: int, gain: GainSettings) -> None:
        dev = handle.device
        dev.sample_rate = sample_rate_hz
        dev.center_freq = frequency_hz
        dev.gain = float(gain.lna_db + gain.vga_db)

    def _enter_receive(self, handle: DeviceHandle) -> None:
        # librtlsdr streams as soon as reads are issued; nothing to arm.
        pass

    def _receive(self, handle: DeviceHandle) -> bytes:
        return bytes(handle.device.read_bytes(self.chunk_bytes))

    def _close(self, handle: DeviceHandle, previous: HandleState) -> None:
        handle.device.close()
