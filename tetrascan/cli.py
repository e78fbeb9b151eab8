#!/usr/bin/env python3
"""tetrascan CLI entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from typing import Any, Dict, List, Optional

from tetrascan.errors import TetraScanError
from tetrascan.io.config import DEFAULT_CONFIG_PATH, ScanConfig, apply_profile, load_config
from tetrascan.io.export import ResultExporter
from tetrascan.io.profiles import serialize_profiles
from tetrascan.sweep.runner import run_sweep, select_adapter
from tetrascan.util.duration import parse_duration_to_seconds
from tetrascan.util.exit_codes import ExitCode
from tetrascan.util.logging import bind_run, configure_logging, get_logger, log_failure
from tetrascan.util.scan_logger import ScanLogger


def _duration_arg(text: str) -> int:
    seconds = parse_duration_to_seconds(text)
    if seconds is None:
        raise argparse.ArgumentTypeError("duration must not be empty")
    return seconds


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(
        description="Sweep a band with an SDR and record frequencies whose power exceeds a threshold",
    )
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"Configuration JSON path (default {DEFAULT_CONFIG_PATH})")

    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--instant", dest="instant_scan", action="store_true", default=None, help="Single pass over the band (overrides instant_scan)")
    mode.add_argument("--scheduled", dest="instant_scan", action="store_false", default=None, help="Repeat passes for --scan-duration (overrides instant_scan)")

    p.add_argument("--scan-duration", dest="scan_duration", type=_duration_arg, help="Scheduled-mode time budget (e.g. '90', '10m', '2h')")
    p.add_argument("--start-after", dest="start_after_duration", type=_duration_arg, help="Scheduled-mode countdown before scanning starts")
    p.add_argument("--driver", type=str, help="Soapy driver key (e.g. hackrf, airspy) or 'rtlsdr_native' for direct librtlsdr")
    p.add_argument("--soapy-args", dest="soapy_args", type=str, help="Comma-separated device args (e.g. 'serial=0000000000000000,index=0')")
    p.add_argument("--threshold", type=float, help="Peak estimate a capture must exceed to count as a detection")
    p.add_argument("--profile", type=str, help="Band profile name (see --list-profiles)")
    p.add_argument("--list-profiles", dest="list_profiles", action="store_true", help="Print built-in band profiles as JSON and exit")
    p.add_argument("--coalesce-intervals", dest="coalesce_intervals", action="store_true", default=None, help="Merge adjacent detection windows in scheduled output")
    p.add_argument("--output-dir", dest="output_dir", type=str, help="Directory for the result JSON file")
    p.add_argument("--jsonl", type=str, help="Append structured sweep events as line-delimited JSON to this path")
    p.add_argument("--log-level", dest="log_level", type=str, help="DEBUG, INFO, WARNING or ERROR (default from TETRASCAN_LOG_LEVEL)")
    p.add_argument("--log-json", dest="log_json", type=str, help="Also write JSON-formatted log records to this file")

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScanConfig:
    """Load the configuration document and apply command-line overrides."""
    config = load_config(args.config)
    overrides: Dict[str, Any] = {}
    for attr in (
        "instant_scan",
        "scan_duration",
        "start_after_duration",
        "driver",
        "soapy_args",
        "threshold",
        "coalesce_intervals",
        "output_dir",
    ):
        value = getattr(args, attr, None)
        if value is not None:
            overrides[attr] = value
    if overrides:
        config = replace(config, **overrides)
    if args.profile:
        config = apply_profile(config, args.profile, explicit={"threshold"} if args.threshold is not None else set())
    return config


def run(args: argparse.Namespace) -> int:
    """Load config, sweep, export; returns a process exit code."""
    if args.list_profiles:
        print(json.dumps(serialize_profiles(), indent=2, sort_keys=True))
        return ExitCode.SUCCESS

    configure_logging(level=args.log_level, json_file=args.log_json)
    logger = get_logger(__name__)

    try:
        config = build_config(args)
        logger.info(
            "Starting %s scan over %s (driver=%s, threshold=%.2f)",
            config.mode,
            config.band.describe(),
            config.driver,
            config.threshold,
        )
        scan_logger = ScanLogger.from_path(args.jsonl) if args.jsonl else None
        bind_run(scan_logger.run_id if scan_logger else None, config.mode)
        adapter = select_adapter(config)
        result = run_sweep(config, adapter, scan_logger=scan_logger)
        ResultExporter(config.output_dir).export(result, config.mode)
        if scan_logger:
            logger.info("Wrote %d sweep event(s) to %s", scan_logger.events_written, scan_logger.path)
    except TetraScanError as exc:
        return log_failure(logger, exc)
    except KeyboardInterrupt:
        print("Stopped by user; no results written.", file=sys.stderr)
        return 130
    return ExitCode.SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
