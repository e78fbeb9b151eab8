"""Line-delimited JSON record of a sweep run (``--jsonl``)."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any, Optional, Union

from tetrascan.errors import ConfigError
from tetrascan.util.logging import get_logger
from tetrascan.util.time import utc_now_str

logger = get_logger(__name__)


class ScanLogger:
    """Append one JSON object per sweep event.

    Every line carries the run id and the pass it belongs to (``None`` before
    the first pass starts). Write failures are reported once and then
    ignored so a full disk never aborts a sweep.
    """

    def __init__(self, path: Path, run_id: Optional[str] = None):
        self.path = path
        self.run_id = run_id or f"run-{int(time.time() * 1000)}-pid{os.getpid()}"
        self.current_pass: Optional[int] = None
        self.events_written = 0
        self._write_failed = False

    @classmethod
    def from_path(cls, jsonl_path: Union[str, Path]) -> "ScanLogger":
        path = Path(jsonl_path).expanduser().absolute()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"cannot create scan log directory: {exc}", config_key="jsonl", config_value=str(path)) from exc
        return cls(path)

    def start_pass(self, pass_index: int, **metadata: Any) -> None:
        self.current_pass = pass_index
        self.log("pass_start", **metadata)

    def log(self, event: str, **fields: Any) -> None:
        record = {
            "ts": utc_now_str(),
            "run_id": self.run_id,
            "pass_index": self.current_pass,
            "event": event,
            **fields,
        }
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(record, default=str) + "\n")
        except OSError as exc:
            if not self._write_failed:
                logger.warning("Scan log %s not writable, dropping events: %s", self.path, exc)
                self._write_failed = True
            return
        self.events_written += 1
