"""SoapySDR-backed capture adapter (HackRF by default)."""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from tetrascan.drivers.base import CaptureAdapter, DeviceHandle, GainSettings, HandleState
from tetrascan.errors import CaptureError, HardwareOpenError

try:  # pragma: no cover - optional dependency
    import SoapySDR  # type: ignore
    from SoapySDR import SOAPY_SDR_CS8, SOAPY_SDR_RX, SOAPY_SDR_TIMEOUT  # type: ignore

    HAVE_SOAPY = True
except Exception:  # pragma: no cover - optional dependency
    HAVE_SOAPY = False
    SoapySDR = None  # type: ignore
    SOAPY_SDR_CS8 = 0  # type: ignore
    SOAPY_SDR_RX = 0  # type: ignore
    SOAPY_SDR_TIMEOUT = -1  # type: ignore

# HackRF front-end amplifier is a fixed +14 dB stage exposed as gain element "AMP".
AMP_ON_DB = 14.0


def parse_soapy_args(text: Optional[str]) -> Dict[str, str]:
    """Parse 'serial=...,index=0' style device arguments."""
    out: Dict[str, str] = {}
    if not text:
        return out
    for kv in str(text).split(","):
        if "=" in kv:
            k, v = kv.split("=", 1)
            out[k.strip()] = v.strip()
    return out


def _read_count(status: Any) -> int:
    n = getattr(status, "ret", status)
    if isinstance(n, tuple):
        n = n[0]
    if isinstance(n, (list, np.ndarray)):
        n = n[0]
    return int(n)


class SoapyCaptureAdapter(CaptureAdapter):
    """Capture raw CS8 bytes from any SoapySDR device.

    Each received element is an interleaved signed 8-bit I/Q pair; the bytes
    are handed on unchanged, reinterpreted as ``uint8``.
    """

    def __init__(
        self,
        driver: str = "hackrf",
        soapy_args: Optional[Dict[str, str]] = None,
        chunk_elems: int = 131072,
        timeout_us: int = 1_000_000,
    ):
        if not HAVE_SOAPY:
            raise HardwareOpenError("SoapySDR not available", context={"driver": driver})
        self.driver = driver
        self.name = f"soapy:{driver}"
        self.soapy_args = dict(soapy_args or {})
        self.chunk_elems = int(chunk_elems)
        self.timeout_us = int(timeout_us)

    def _open(self) -> Any:
        dev_args: Dict[str, str] = {"driver": self.driver}
        dev_args.update({str(k): str(v) for k, v in self.soapy_args.items()})
        return SoapySDR.Device(dev_args)  # type: ignore[call-arg]

    def _configure(self, handle: DeviceHandle, frequency_hz: int, sample_rate_hz: int, gain: GainSettings) -> None:
        dev = handle.device
        dev.setSampleRate(SOAPY_SDR_RX, 0, float(sample_rate_hz))
        dev.setFrequency(SOAPY_SDR_RX, 0, float(frequency_hz))
        gain_names = set(dev.listGains(SOAPY_SDR_RX, 0))
        if "AMP" in gain_names:
            dev.setGain(SOAPY_SDR_RX, 0, "AMP", AMP_ON_DB if gain.amp_enabled else 0.0)
        if "LNA" in gain_names and "VGA" in gain_names:
            dev.setGain(SOAPY_SDR_RX, 0, "LNA", float(gain.lna_db))
            dev.setGain(SOAPY_SDR_RX, 0, "VGA", float(gain.vga_db))
        else:
            dev.setGain(SOAPY_SDR_RX, 0, float(gain.lna_db + gain.vga_db))

    def _enter_receive(self, handle: DeviceHandle) -> None:
        handle.stream = handle.device.setupStream(SOAPY_SDR_RX, SOAPY_SDR_CS8)
        handle.device.activateStream(handle.stream)
        handle.extra["buffer"] = np.empty(2 * self.chunk_elems, dtype=np.int8)

    def _receive(self, handle: DeviceHandle) -> np.ndarray:
        buff = handle.extra["buffer"]
        status = handle.device.readStream(handle.stream, [buff], self.chunk_elems, timeoutUs=self.timeout_us)
        n = _read_count(status)
        if n == SOAPY_SDR_TIMEOUT:
            return np.zeros(0, dtype=np.uint8)
        if n < 0:
            raise CaptureError(
                f"readStream failed with status {n}",
                context={"frequency_hz": handle.frequency_hz, "driver": self.driver},
            )
        return buff[: 2 * n].view(np.uint8).copy()

    def _close(self, handle: DeviceHandle, previous: HandleState) -> None:
        dev = handle.device
        if handle.stream is not None:
            dev.deactivateStream(handle.stream)
            dev.closeStream(handle.stream)
            handle.stream = None
        SoapySDR.Device.unmake(dev)  # type: ignore[union-attr]
