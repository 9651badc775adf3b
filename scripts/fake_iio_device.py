#!/usr/bin/env python3
"""
Fake IIO device: writes ``in_voltage<N>_raw`` files so the service can run
without hardware.

Each channel's code is the value that converts to the middle of its
threshold window, plus a little noise.  A matching YAML config is written
next to the raw files.

Usage:
    python scripts/fake_iio_device.py /tmp/iio                  # update every 2 s
    python scripts/fake_iio_device.py /tmp/iio --once           # write once and exit
    python scripts/fake_iio_device.py /tmp/iio --zero VBAT      # VBAT reads 0 (unsettled)

Then, in another terminal:
    iio-hwmon --session-bus --config /tmp/iio/board.yaml
"""

from __future__ import annotations

import argparse
import random
import sys
import time
from pathlib import Path

import yaml

# Add src to path so we can import without installing
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from iio_hwmon import Channel, ThresholdKind, default_registry
from iio_hwmon.constants import ADC_REFERENCE_V, ADC_STEPS

NOISE_CODES = 3


def nominal_code(ch: Channel) -> int:
    """Raw code whose converted voltage sits mid-window for *ch*."""
    if ch.threshold_kind is ThresholdKind.WARNING_LOW_ONLY:
        target = ch.warning_low + 0.4
    else:
        target = (ch.crit_max + ch.crit_min) / 2
    denominator = ch.r2 if ch.r2 != 0 else 1
    code = target * (ADC_STEPS / ADC_REFERENCE_V) * denominator / (ch.r1 + ch.r2) - 1
    return max(1, min(ADC_STEPS - 1, round(code)))


def write_config(directory: Path) -> Path:
    channels = []
    for ch in default_registry():
        entry = {
            "name": ch.name,
            "r1": ch.r1,
            "r2": ch.r2,
            "crit_max": ch.crit_max,
            "crit_min": ch.crit_min,
        }
        if ch.threshold_kind is ThresholdKind.WARNING_LOW_ONLY:
            entry["threshold"] = ch.threshold_kind.value
            entry["warning_low"] = ch.warning_low
        channels.append(entry)

    path = directory / "board.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(
            {"base_path": str(directory / "in_voltage"), "channels": channels},
            f,
            sort_keys=False,
        )
    return path


def write_samples(directory: Path, zero: set[str]) -> None:
    for ch in default_registry():
        if ch.name in zero:
            code = 0
        else:
            code = max(1, nominal_code(ch) + random.randint(-NOISE_CODES, NOISE_CODES))
        (directory / f"in_voltage{ch.index}_raw").write_text(f"{code}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Write fake IIO raw files for iio-hwmon.")
    parser.add_argument("directory", type=Path, help="Directory to write raw files into")
    parser.add_argument("--once", action="store_true", help="Write one sample set and exit")
    parser.add_argument("--period", type=float, default=2.0, help="Seconds between updates")
    parser.add_argument(
        "--zero",
        action="append",
        default=[],
        metavar="NAME",
        help="Channel that always reads 0 (repeatable)",
    )
    return parser


def main() -> int:
    args = build_parser().parse_args()
    args.directory.mkdir(parents=True, exist_ok=True)

    config_path = write_config(args.directory)
    print(f"Config written to {config_path}")

    zero = set(args.zero)
    write_samples(args.directory, zero)
    if args.once:
        return 0

    try:
        while True:
            time.sleep(args.period)
            write_samples(args.directory, zero)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
