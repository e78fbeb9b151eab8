"""
Scan configuration loading and validation.

The configuration document is JSON. Only ``instant_scan``,
``start_after_duration`` and ``scan_duration`` are required; every other key
tunes the sweep and falls back to the defaults below.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from tetrascan.drivers.base import GainSettings
from tetrascan.errors import ConfigError
from tetrascan.io.profiles import get_profile
from tetrascan.sweep.scheduler import FrequencyBand
from tetrascan.util.logging import get_logger

logger = get_logger(__name__)


DEFAULT_CONFIG_PATH = "config.json"

DEFAULT_BAND = FrequencyBand(start_hz=380_000_000, end_hz=420_000_000, step_hz=1_000_000)
"""TETRA 380-420 MHz on a 1 MHz grid."""

DEFAULT_SAMPLE_RATE_HZ = 1_000_000
DEFAULT_CAPTURE_SECONDS = 1.0
DEFAULT_THRESHOLD = 49.0
"""Strict lower bound on a capture's peak estimate for it to count as a detection."""

DEFAULT_DRIVER = "hackrf"

_KNOWN_KEYS = {
    "instant_scan",
    "start_after_duration",
    "scan_duration",
    "band",
    "profile",
    "sample_rate_hz",
    "capture_seconds",
    "threshold",
    "gain",
    "driver",
    "soapy_args",
    "coalesce_intervals",
    "output_dir",
}


@dataclass(frozen=True)
class ScanConfig:
    instant_scan: bool
    start_after_duration: int
    scan_duration: int
    band: FrequencyBand = DEFAULT_BAND
    profile: Optional[str] = None
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ
    capture_seconds: float = DEFAULT_CAPTURE_SECONDS
    threshold: float = DEFAULT_THRESHOLD
    gain: GainSettings = field(default_factory=GainSettings)
    driver: str = DEFAULT_DRIVER
    soapy_args: Optional[str] = None
    coalesce_intervals: bool = False
    output_dir: str = "."

    @property
    def mode(self) -> str:
        return "instant" if self.instant_scan else "scheduled"

    @property
    def interval_seconds(self) -> int:
        """Width of the elapsed-time window recorded per capture."""
        return max(1, int(math.ceil(self.capture_seconds)))


def _require_bool(data: Mapping[str, Any], key: str) -> bool:
    if key not in data:
        raise ConfigError(f"missing required key '{key}'", config_key=key)
    value = data[key]
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false", config_key=key, config_value=value)
    return value


def _as_int(key: str, value: Any, *, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{key}' must be an integer", config_key=key, config_value=value)
    if isinstance(value, float) and not value.is_integer():
        raise ConfigError(f"'{key}' must be an integer", config_key=key, config_value=value)
    ivalue = int(value)
    if minimum is not None and ivalue < minimum:
        raise ConfigError(f"'{key}' must be >= {minimum}", config_key=key, config_value=value)
    return ivalue


def _as_float(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{key}' must be a number", config_key=key, config_value=value)
    return float(value)


def _parse_band(raw: Any) -> FrequencyBand:
    if not isinstance(raw, Mapping):
        raise ConfigError("'band' must be an object with start_hz, end_hz and step_hz", config_key="band")
    try:
        start = _as_int("band.start_hz", raw["start_hz"], minimum=0)
        end = _as_int("band.end_hz", raw["end_hz"], minimum=0)
        step = _as_int("band.step_hz", raw.get("step_hz", DEFAULT_BAND.step_hz), minimum=1)
    except KeyError as exc:
        raise ConfigError(f"'band' is missing {exc.args[0]!r}", config_key="band") from exc
    try:
        return FrequencyBand(start, end, step)
    except ValueError as exc:
        raise ConfigError(f"invalid band: {exc}", config_key="band") from exc


def _parse_gain(raw: Any) -> GainSettings:
    if not isinstance(raw, Mapping):
        raise ConfigError("'gain' must be an object", config_key="gain")
    defaults = GainSettings()
    amp = raw.get("amp_enabled", defaults.amp_enabled)
    if not isinstance(amp, bool):
        raise ConfigError("'gain.amp_enabled' must be true or false", config_key="gain.amp_enabled", config_value=amp)
    return GainSettings(
        amp_enabled=amp,
        lna_db=_as_float("gain.lna_db", raw.get("lna_db", defaults.lna_db)),
        vga_db=_as_float("gain.vga_db", raw.get("vga_db", defaults.vga_db)),
    )


def config_from_dict(data: Any) -> ScanConfig:
    """Validate a decoded configuration document."""
    if not isinstance(data, Mapping):
        raise ConfigError("configuration document must be a JSON object")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    kwargs: Dict[str, Any] = {
        "instant_scan": _require_bool(data, "instant_scan"),
    }
    for key in ("start_after_duration", "scan_duration"):
        if key not in data:
            raise ConfigError(f"missing required key '{key}'", config_key=key)
        kwargs[key] = _as_int(key, data[key], minimum=0)

    if "sample_rate_hz" in data:
        kwargs["sample_rate_hz"] = _as_int("sample_rate_hz", data["sample_rate_hz"], minimum=1)
    if "capture_seconds" in data:
        seconds = _as_float("capture_seconds", data["capture_seconds"])
        if seconds <= 0:
            raise ConfigError("'capture_seconds' must be > 0", config_key="capture_seconds", config_value=seconds)
        kwargs["capture_seconds"] = seconds
    if "threshold" in data:
        kwargs["threshold"] = _as_float("threshold", data["threshold"])
    if "gain" in data:
        kwargs["gain"] = _parse_gain(data["gain"])
    if "driver" in data:
        driver = data["driver"]
        if not isinstance(driver, str) or not driver.strip():
            raise ConfigError("'driver' must be a non-empty string", config_key="driver", config_value=driver)
        kwargs["driver"] = driver.strip()
    if data.get("soapy_args") is not None:
        kwargs["soapy_args"] = str(data["soapy_args"])
    if "coalesce_intervals" in data:
        coalesce = data["coalesce_intervals"]
        if not isinstance(coalesce, bool):
            raise ConfigError("'coalesce_intervals' must be true or false", config_key="coalesce_intervals")
        kwargs["coalesce_intervals"] = coalesce
    if data.get("output_dir") is not None:
        kwargs["output_dir"] = str(data["output_dir"])

    config = ScanConfig(**kwargs)
    if data.get("profile"):
        config = apply_profile(config, str(data["profile"]), explicit=set(data))
    if "band" in data:
        config = replace(config, band=_parse_band(data["band"]))
    return config


def apply_profile(config: ScanConfig, name: str, *, explicit: Optional[set] = None) -> ScanConfig:
    """Overlay a named band profile; keys in ``explicit`` keep their values."""
    profile = get_profile(name)
    if profile is None:
        raise ConfigError(f"unknown band profile '{name}'", config_key="profile", config_value=name)
    explicit = explicit or set()
    updates: Dict[str, Any] = {"profile": profile.name}
    if "band" not in explicit:
        updates["band"] = profile.band()
    if profile.sample_rate_hz is not None and "sample_rate_hz" not in explicit:
        updates["sample_rate_hz"] = profile.sample_rate_hz
    if profile.threshold is not None and "threshold" not in explicit:
        updates["threshold"] = profile.threshold
    return replace(config, **updates)


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> ScanConfig:
    """Read and validate the configuration document at ``path``."""
    config_path = Path(path).expanduser()
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"configuration file not found: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"configuration file is not valid JSON: {config_path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"configuration file is not valid UTF-8: {config_path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read configuration file {config_path}: {exc}") from exc
    config = config_from_dict(data)
    logger.debug("Loaded %s-mode configuration from %s", config.mode, config_path)
    return config
