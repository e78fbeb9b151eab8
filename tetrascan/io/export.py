"""Result document serialization and persistence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from tetrascan.errors import ExportError
from tetrascan.util.logging import get_logger

logger = get_logger(__name__)

OUTPUT_NAMES: Dict[str, str] = {
    "instant": "tetra_instantdata.json",
    "scheduled": "tetra_scheduledata.json",
}


def render_result(result: Mapping[str, Any]) -> str:
    """Pretty-print a finalized sweep result as JSON."""
    try:
        return json.dumps(result, indent=2, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise ExportError(f"sweep result is not serializable: {exc}") from exc


class ResultExporter:
    """Write the finalized sweep result for a mode into ``output_dir``."""

    def __init__(self, output_dir: Union[str, Path] = ".", *, echo: bool = True) -> None:
        self.output_dir = Path(output_dir).expanduser()
        self.echo = echo

    def output_path(self, mode: str) -> Path:
        try:
            return self.output_dir / OUTPUT_NAMES[mode]
        except KeyError:
            raise ExportError(f"unknown scan mode '{mode}'") from None

    def export(self, result: Mapping[str, Any], mode: str) -> Path:
        text = render_result(result)
        path = self.output_path(mode)
        if self.echo:
            print(text, flush=True)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ExportError(f"failed to write {path}: {exc}", context={"path": str(path)}) from exc
        logger.info("Wrote %d record(s) to %s", len(result), path)
        return path
