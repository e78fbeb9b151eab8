"""Documented exit codes for the tetrascan CLI.

Exit codes follow UNIX conventions:
- 0: Success
- 1: General/unspecified error
- 2: Invalid command-line arguments or usage
- 3-6: Application-specific errors

These codes enable shell scripts and schedulers (cron, systemd timers) to
distinguish failure modes without parsing stderr output.

Usage:
    from tetrascan.util.exit_codes import ExitCode
    sys.exit(ExitCode.DEVICE_UNAVAILABLE)
"""

from __future__ import annotations


class ExitCode:
    """Exit code constants for tetrascan processes.

    Attributes:
        SUCCESS: Normal termination, no errors.
        GENERAL_ERROR: Unspecified runtime error.
        INVALID_ARGS: Command-line argument validation failed.
        CONFIG_ERROR: Configuration document missing or malformed.
        DEVICE_UNAVAILABLE: SDR device could not be opened or configured.
        CAPTURE_FAILED: Sample capture failed mid-sweep.
        EXPORT_FAILED: Result document could not be serialized or written.
    """

    SUCCESS: int = 0
    GENERAL_ERROR: int = 1
    INVALID_ARGS: int = 2
    CONFIG_ERROR: int = 3
    DEVICE_UNAVAILABLE: int = 4
    CAPTURE_FAILED: int = 5
    EXPORT_FAILED: int = 6

    @classmethod
    def message(cls, code: int) -> str:
        """Return a human-readable message for an exit code."""
        messages = {
            cls.SUCCESS: "Success",
            cls.GENERAL_ERROR: "General error",
            cls.INVALID_ARGS: "Invalid arguments",
            cls.CONFIG_ERROR: "Configuration error",
            cls.DEVICE_UNAVAILABLE: "SDR device unavailable",
            cls.CAPTURE_FAILED: "Capture failed",
            cls.EXPORT_FAILED: "Export failed",
        }
        return messages.get(code, f"Unknown exit code {code}")
