"""
Command-line entry point for the ``iio-hwmon`` service.

Usage:
    iio-hwmon                                   # built-in board, system bus
    iio-hwmon --config /etc/iio-hwmon/board.yaml
    iio-hwmon --session-bus --log-level DEBUG   # development
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dbus_fast.constants import BusType

from .config import HwmonConfig, load_config
from .exceptions import BusError, ValidationError
from .service import serve

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iio-hwmon",
        description="Publish IIO ADC voltages and thresholds on D-Bus.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML channel table (default: built-in board table)",
    )
    parser.add_argument(
        "--session-bus",
        action="store_true",
        help="Publish on the session bus instead of the system bus",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=_LOG_FORMAT, stream=sys.stderr)

    try:
        config = load_config(args.config) if args.config else HwmonConfig()
    except (OSError, ValidationError) as exc:
        logger.error("Config error: %s", exc)
        return 1

    bus_type = BusType.SESSION if args.session_bus else BusType.SYSTEM
    try:
        asyncio.run(serve(config, bus_type))
    except BusError as exc:
        logger.critical("%s", exc)
        return 1
    except ValidationError as exc:
        logger.error("Channel table error: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
