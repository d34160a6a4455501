from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from batlab.collector import TelemetryCollector
from batlab.config import AppConfig, default_config, load_config
from batlab.errors import BatteryChargingError, BatteryError, TelemetryError
from batlab.logging_utils import configure_logging, resolve_log_level
from batlab.schema import validate_payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batlab",
        description="Battery, CPU, memory and thermal telemetry for FreeBSD and Linux laptops",
    )
    parser.add_argument(
        "--config",
        help="Path to CFG configuration file (built-in defaults when omitted)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable debug logging (-v) or trace logging (-vv)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sample", help="Collect a single telemetry sample")
    subparsers.add_parser("capacity", help="Show battery design and full capacity")

    metadata = subparsers.add_parser("metadata", help="Show system and run metadata")
    metadata.add_argument(
        "--config-name",
        help="Configuration name (letters, numbers, hyphens, underscores)",
    )
    metadata.add_argument("--workload", help="Workload name recorded in the run id")
    metadata.add_argument("--hz", type=float, help="Sampling frequency in Hz")
    return parser


def _emit(payload: Any, kind: str | None, pretty: bool, logger: logging.Logger) -> None:
    if kind is not None:
        schema_errors = validate_payload(payload, kind)
        if schema_errors:
            logger.warning("Schema validation failed with %s errors.", len(schema_errors))
            logger.debug("Schema errors: %s", schema_errors)
        else:
            logger.debug("Schema validation passed.")
    print(json.dumps(payload, indent=2) if pretty else json.dumps(payload))


def run(args: argparse.Namespace, config: AppConfig, pretty: bool) -> int:
    logger = logging.getLogger("batlab")
    collector = TelemetryCollector(config)

    try:
        if args.command == "sample":
            _emit(collector.collect().to_dict(), "sample", pretty, logger)
        elif args.command == "capacity":
            capacity = collector.battery_capacity()
            _emit(capacity.to_dict() if capacity else None, None, pretty, logger)
        else:
            metadata = collector.run_metadata(
                config_name=args.config_name,
                workload=args.workload,
                sampling_hz=args.hz,
            )
            _emit(metadata.to_dict(), "metadata", pretty, logger)
    except BatteryChargingError as exc:
        logger.error("%s; unplug the charger before measuring.", exc)
        return 2
    except BatteryError as exc:
        logger.error("Battery telemetry failed: %s", exc)
        return 1
    except TelemetryError as exc:
        logger.error("Telemetry failed: %s", exc)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = resolve_log_level(args.verbose, args.log_level)
    configure_logging(level)
    config = load_config(args.config) if args.config else default_config()
    return run(args, config, pretty=level <= logging.DEBUG)


if __name__ == "__main__":
    sys.exit(main())
