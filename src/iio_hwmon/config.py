"""
Startup configuration: an optional YAML file that replaces the built-in
channel table and raw-file base path.

The file is read once before any channel is registered; nothing in it can be
changed while the service runs.  Channel order in the file is the index
order, so the n-th entry is read from ``<base_path><n>_raw``::

    from iio_hwmon.config import load_config

    config = load_config("/etc/iio-hwmon/board.yaml")
    registry = config.registry()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dbus_fast.validators import is_object_path_valid

from .channels import DEFAULT_CHANNELS, ChannelRegistry, ChannelSpec, ThresholdKind
from .constants import DEFAULT_BASE_PATH, SENSOR_PATH_PREFIX, VBAT_WARNING_LOW
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration data model
# ---------------------------------------------------------------------------

_VALID_THRESHOLDS = {kind.value: kind for kind in ThresholdKind}


@dataclass(frozen=True)
class HwmonConfig:
    """Validated service configuration."""

    base_path: str = DEFAULT_BASE_PATH
    channels: tuple[ChannelSpec, ...] = field(default=DEFAULT_CHANNELS)

    def registry(self) -> ChannelRegistry:
        """Build the channel registry described by this config."""
        return ChannelRegistry.from_specs(self.channels)


# ---------------------------------------------------------------------------
# Config loading & validation
# ---------------------------------------------------------------------------


def load_config(path: str | Path) -> HwmonConfig:
    """Load and validate a channel configuration from a YAML file.

    Args:
        path: Path to the YAML config file.

    Returns:
        A validated :class:`HwmonConfig`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        OSError: If *path* cannot be opened or read.
        ValidationError: If the config is malformed or contains invalid values.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ValidationError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    base_path = raw.get("base_path", DEFAULT_BASE_PATH)
    if not isinstance(base_path, str) or not base_path:
        raise ValidationError("'base_path' must be a non-empty string")

    raw_channels = raw.get("channels")
    if not isinstance(raw_channels, list) or not raw_channels:
        raise ValidationError("Config must contain a non-empty 'channels' list")

    channels = tuple(_parse_channel(pos, data) for pos, data in enumerate(raw_channels))

    names = [spec.name for spec in channels]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate channel names: {', '.join(duplicates)}")

    logger.info("Loaded %d channels from %s", len(channels), path)
    return HwmonConfig(base_path=base_path, channels=channels)


def _parse_channel(position: int, data: object) -> ChannelSpec:
    """Parse and validate the channel entry at *position*."""
    if not isinstance(data, dict):
        raise ValidationError(f"Channel {position} config must be a mapping")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ValidationError(f"Channel {position}: 'name' must be a non-empty string")
    if "/" in name:
        raise ValidationError(f"Channel {position}: 'name' must not contain '/', got {name!r}")
    if not is_object_path_valid(f"{SENSOR_PATH_PREFIX}/{name}"):
        raise ValidationError(
            f"Channel {position}: 'name' may only contain letters, digits and '_', got {name!r}"
        )

    r1 = _require_number(data, "r1", position)
    r2 = _require_number(data, "r2", position)
    if r1 < 0 or r2 < 0:
        raise ValidationError(f"Channel {position}: resistor values must be non-negative")

    crit_max = _require_number(data, "crit_max", position)
    crit_min = _require_number(data, "crit_min", position)

    threshold_str = data.get("threshold", ThresholdKind.STANDARD.value)
    if threshold_str not in _VALID_THRESHOLDS:
        raise ValidationError(
            f"Channel {position}: threshold must be one of "
            f"{list(_VALID_THRESHOLDS)}, got {threshold_str!r}"
        )

    warning_low = VBAT_WARNING_LOW
    if "warning_low" in data:
        warning_low = _require_number(data, "warning_low", position)

    return ChannelSpec(
        name=name,
        crit_max=crit_max,
        crit_min=crit_min,
        r1=r1,
        r2=r2,
        threshold_kind=_VALID_THRESHOLDS[threshold_str],
        warning_low=warning_low,
    )


def _require_number(data: dict, key: str, position: int) -> float:
    val = data.get(key)
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ValidationError(f"Channel {position}: '{key}' must be a number, got {val!r}")
    return float(val)
