"""
Exception hierarchy for tetrascan.

- TetraScanError (base)
  ├── ConfigError
  ├── HardwareError
  │   ├── HardwareOpenError
  │   ├── HardwareConfigureError
  │   ├── CaptureError
  │   └── HandleStateError
  └── ExportError

Every error is fatal for the current run. The CLI maps each class to an
exit code via ``exit_code``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from tetrascan.util.exit_codes import ExitCode


class TetraScanError(Exception):
    """Base exception for all tetrascan errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (frequency, path, ...)
    """

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for structured logs."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigError(TetraScanError):
    """Raised when the configuration document is missing, malformed or invalid."""

    exit_code = ExitCode.CONFIG_ERROR

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", None) or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context, **kwargs)


class HardwareError(TetraScanError):
    """Base class for capture-device errors."""

    exit_code = ExitCode.DEVICE_UNAVAILABLE


class HardwareOpenError(HardwareError):
    """The capture device could not be opened."""


class HardwareConfigureError(HardwareError):
    """Tuning, sample rate, gain or RX-mode setup was rejected by the device."""


class CaptureError(HardwareError):
    """Receiving samples failed."""

    exit_code = ExitCode.CAPTURE_FAILED


class HandleStateError(HardwareError):
    """An operation was attempted that the device handle's state does not allow."""

    exit_code = ExitCode.GENERAL_ERROR


class ExportError(TetraScanError):
    """Raised when the sweep result cannot be serialized or written."""

    exit_code = ExitCode.EXPORT_FAILED
