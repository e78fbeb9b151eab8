"""Duration parsing helpers for CLI arguments."""

from __future__ import annotations

import argparse
import math
from typing import Any, Optional


def parse_duration_to_seconds(spec: Optional[Any]) -> Optional[int]:
    """Parse strings like '30', '10m', '2h', returning whole seconds."""

    if spec is None:
        return None
    if isinstance(spec, bool):
        raise argparse.ArgumentTypeError(f"Invalid duration '{spec}'")
    if isinstance(spec, (int, float)):
        value = float(spec)
        unit = "s"
    else:
        text = str(spec).strip().lower()
        if not text:
            return None
        unit = text[-1]
        if unit.isalpha():
            value_part = text[:-1]
        else:
            unit = "s"
            value_part = text
        try:
            value = float(value_part)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"Invalid duration '{spec}'") from exc
    multipliers = {
        "s": 1.0,
        "m": 60.0,
        "h": 3600.0,
        "d": 86400.0,
    }
    if unit not in multipliers:
        raise argparse.ArgumentTypeError(f"Unsupported duration suffix '{unit}'")
    seconds = value * multipliers[unit]
    if not math.isfinite(seconds):
        raise argparse.ArgumentTypeError(f"Duration must be finite: '{spec}'")
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"Duration must not be negative: '{spec}'")
    return int(round(seconds))
