"""
Channel registry: the fixed, ordered table of ADC channels and their
calibration constants.

Each channel's ``index`` is its position in the registry and must match the
numeric suffix of its raw file (``in_voltage<index>_raw``), so order is
significant.  The registry is immutable apart from one cell per channel
holding the most recent voltage, which only the sampling scheduler writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Sequence

from .constants import SENTINEL_VALUE, VBAT_WARNING_LOW
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Enums & Data
# ---------------------------------------------------------------------------


class ThresholdKind(Enum):
    """Which threshold properties a channel exposes besides ``CriticalLow``."""

    STANDARD = "standard"  # CriticalHigh
    WARNING_LOW_ONLY = "warning_low"  # WarningLow


@dataclass(frozen=True)
class ChannelSpec:
    """Calibration constants for one channel, before an index is assigned."""

    name: str
    crit_max: float
    crit_min: float
    r1: float
    r2: float
    threshold_kind: ThresholdKind = ThresholdKind.STANDARD
    warning_low: float = VBAT_WARNING_LOW


@dataclass(frozen=True)
class Channel:
    """One physical sensor line with its raw-file index."""

    name: str
    index: int
    r1: float
    r2: float
    crit_max: float
    crit_min: float
    threshold_kind: ThresholdKind = ThresholdKind.STANDARD
    warning_low: float = VBAT_WARNING_LOW

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``in_voltage7 VBAT``."""
        return f"in_voltage{self.index} {self.name}"


# ---------------------------------------------------------------------------
# Reference board table
# ---------------------------------------------------------------------------

DEFAULT_CHANNELS: tuple[ChannelSpec, ...] = (
    ChannelSpec("PLUS12V", 12.9, 11.16, 8.2, 1.0),
    ChannelSpec("PLUS5V", 5.37, 4.65, 3.0, 1.0),
    ChannelSpec("PLUS3DOT3V", 3.54, 3.06, 1.8, 1.0),
    ChannelSpec("PVCCIN_CPU0", 2.04, 1.56, 1.0, 3.0),
    ChannelSpec("PVCCIN_CPU1", 2.04, 1.56, 1.0, 3.0),
    ChannelSpec("PVCCIO_CPU0", 1.25, 0.75, 1.0, 1.0),
    ChannelSpec("PVCCIO_CPU1", 1.25, 0.75, 1.0, 1.0),
    ChannelSpec("VBAT", 0, 2.5, 787.0, 402.0, ThresholdKind.WARNING_LOW_ONLY),
    ChannelSpec("PVDDQ_ABCD_CPU0", 1.29, 1.11, 1.0, 0),
    ChannelSpec("PVDDQ_EFGH_CPU0", 1.29, 1.11, 1.0, 0),
    ChannelSpec("PVDDQ_ABCD_CPU1", 1.29, 1.11, 1.0, 0),
    ChannelSpec("PVDDQ_EFGH_CPU1", 1.29, 1.11, 1.0, 0),
    ChannelSpec("P1V05_PCH", 1.11, 0.99, 1.0, 0),
    ChannelSpec("PVNN_PCH", 1.07, 0.93, 1.0, 0),
    ChannelSpec("P1V8_PCH", 1.94, 1.66, 5.6, 15.0),
    ChannelSpec("PGPPA_PCH", 3.54, 3.06, 1.8, 1),
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ChannelRegistry:
    """Ordered, fixed set of :class:`Channel` records.

    Args:
        channels: Channels in index order.  Indices must run 0, 1, 2, ...
            and names must be unique.

    Raises:
        ValidationError: If indices are not contiguous or a name repeats.
    """

    def __init__(self, channels: Sequence[Channel]) -> None:
        seen: set[str] = set()
        for position, ch in enumerate(channels):
            if ch.index != position:
                raise ValidationError(
                    f"Channel {ch.name!r} has index {ch.index}, expected {position}"
                )
            if ch.name in seen:
                raise ValidationError(f"Duplicate channel name {ch.name!r}")
            seen.add(ch.name)

        self._channels: tuple[Channel, ...] = tuple(channels)
        self._last_values: list[float] = [SENTINEL_VALUE] * len(self._channels)

    @classmethod
    def from_specs(cls, specs: Iterable[ChannelSpec]) -> ChannelRegistry:
        """Build a registry, assigning indices in iteration order."""
        channels = [
            Channel(
                name=spec.name,
                index=index,
                r1=spec.r1,
                r2=spec.r2,
                crit_max=spec.crit_max,
                crit_min=spec.crit_min,
                threshold_kind=spec.threshold_kind,
                warning_low=spec.warning_low,
            )
            for index, spec in enumerate(specs)
        ]
        return cls(channels)

    # -- Sequence access ----------------------------------------------------

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._channels)

    def __len__(self) -> int:
        return len(self._channels)

    def __getitem__(self, index: int) -> Channel:
        return self._channels[index]

    @property
    def channels(self) -> tuple[Channel, ...]:
        return self._channels

    def by_name(self, name: str) -> Channel:
        """Return the channel called *name*.

        Raises:
            KeyError: If no channel has that name.
        """
        for ch in self._channels:
            if ch.name == name:
                return ch
        raise KeyError(name)

    # -- Last-value cells ---------------------------------------------------

    def last_value(self, index: int) -> float:
        """Most recent voltage for channel *index* (sentinel until sampled)."""
        return self._last_values[index]

    def record_value(self, index: int, value: float) -> None:
        """Store the latest voltage for channel *index*.

        Only the sampling scheduler calls this.
        """
        self._last_values[index] = value


def default_registry() -> ChannelRegistry:
    """Return a registry for the reference board's sixteen channels."""
    return ChannelRegistry.from_specs(DEFAULT_CHANNELS)
