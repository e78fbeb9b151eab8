"""Logging setup for tetrascan sweeps.

Console output goes to stderr so stdout stays reserved for the result
document. An optional JSON-lines file mirrors every record for later
analysis. Records may carry sweep context through ``extra=``:

    logger.info("Capture complete", extra={"frequency_hz": 390_000_000, "pass_index": 2})

``bind_run`` attaches the run id and scan mode to every record emitted after
it is called.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO, Union

from tetrascan.errors import TetraScanError
from tetrascan.util.exit_codes import ExitCode


_ROOT = "tetrascan"
_configured = False

# Sweep fields copied from ``extra=`` into JSON records.
_SWEEP_FIELDS = ("frequency_hz", "pass_index", "elapsed_s", "duration_ms", "error_type", "exit_code", "context")


class RunContextFilter(logging.Filter):
    """Stamp ``run_id`` and ``mode`` onto every record passing the root handler."""

    def __init__(self) -> None:
        super().__init__()
        self.run_id: Optional[str] = None
        self.mode: Optional[str] = None

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id
        record.mode = self.mode
        return True


_run_context = RunContextFilter()


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        output: Dict[str, Any] = {
            "ts": _record_time(record).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("run_id", "mode"):
            if getattr(record, key, None):
                output[key] = getattr(record, key)
        for key in _SWEEP_FIELDS:
            if hasattr(record, key):
                output[key] = getattr(record, key)
        if record.exc_info:
            output["traceback"] = "".join(traceback.format_exception(*record.exc_info))
        return json.dumps(output, default=str)


class ConsoleFormatter(logging.Formatter):
    """``[time] LEVEL [module] message (pass #n, f=MHz, +elapsed)`` on stderr."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True, stream: Optional[TextIO] = None):
        super().__init__()
        target = stream if stream is not None else sys.stderr
        self.use_color = use_color and hasattr(target, "isatty") and target.isatty()

    def _sweep_suffix(self, record: logging.LogRecord) -> str:
        parts = []
        if getattr(record, "pass_index", None) is not None:
            parts.append(f"pass #{record.pass_index}")
        if getattr(record, "frequency_hz", None) is not None:
            parts.append(f"f={float(record.frequency_hz) / 1e6:.3f} MHz")
        if getattr(record, "elapsed_s", None) is not None:
            parts.append(f"+{record.elapsed_s}s")
        return f" ({', '.join(parts)})" if parts else ""

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_color:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"
        module = record.name[len(_ROOT) + 1:] if record.name.startswith(_ROOT + ".") else record.name
        line = (
            f"[{_record_time(record).strftime('%H:%M:%S')}] {level} [{module}] "
            f"{record.getMessage()}{self._sweep_suffix(record)}"
        )
        if record.exc_info:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return line


def _resolve_level(level: Union[str, int, None]) -> int:
    if level is None:
        if os.environ.get("TETRASCAN_DEBUG", "").strip().lower() in ("1", "true", "yes"):
            return logging.DEBUG
        level = os.environ.get("TETRASCAN_LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    *,
    level: Union[str, int, None] = None,
    json_file: Optional[str] = None,
    use_color: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Install the console handler and, if requested, a JSON-lines file handler.

    ``level`` falls back to TETRASCAN_DEBUG / TETRASCAN_LOG_LEVEL, then INFO.
    Handlers from an earlier call are replaced. Returns the package root logger.
    """
    global _configured

    numeric_level = _resolve_level(level)
    root = logging.getLogger(_ROOT)
    root.setLevel(numeric_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setFormatter(ConsoleFormatter(use_color=use_color, stream=stream))
    console.addFilter(_run_context)
    root.addHandler(console)

    if json_file:
        try:
            file_handler = logging.FileHandler(json_file, mode="a", encoding="utf-8")
        except OSError as exc:
            root.warning("JSON log file %s unavailable, console only: %s", json_file, exc)
        else:
            file_handler.setFormatter(JSONFormatter())
            file_handler.addFilter(_run_context)
            root.addHandler(file_handler)

    root.propagate = False
    _configured = True
    return root


def bind_run(run_id: Optional[str], mode: Optional[str]) -> None:
    """Tag subsequent records with the sweep's run id and scan mode."""
    _run_context.run_id = run_id
    _run_context.mode = mode


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``tetrascan`` namespace; configures defaults on first use."""
    if not _configured:
        configure_logging()
    if name == "__main__":
        name = f"{_ROOT}.main"
    elif name != _ROOT and not name.startswith(_ROOT + "."):
        name = f"{_ROOT}.{name}"
    return logging.getLogger(name)


def log_failure(logger: logging.Logger, exc: TetraScanError) -> int:
    """Report a fatal sweep error with its context; returns the exit code for it."""
    details = exc.to_dict()
    extra: Dict[str, Any] = {
        "error_type": details["error_type"],
        "exit_code": exc.exit_code,
        "context": details["context"],
    }
    if details["context"].get("frequency_hz") is not None:
        extra["frequency_hz"] = details["context"]["frequency_hz"]
    logger.error("%s: %s", ExitCode.message(exc.exit_code), exc, extra=extra)
    return exc.exit_code
