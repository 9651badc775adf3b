"""
Object exposition layer: puts each channel on D-Bus as a value object and a
threshold object.

For a channel named ``PLUS12V`` the service exports, at
``/xyz/openbmc_project/sensors/voltage/PLUS12V``:

* ``xyz.openbmc_project.Sensor.Value`` with ``Value`` (``d``), starting at
  the 88.88 sentinel;
* ``xyz.openbmc_project.Sensor.Threshold.Critical`` with ``CriticalHigh`` and
  ``CriticalLow`` (or ``WarningLow`` and ``CriticalLow`` for channels whose
  :class:`~iio_hwmon.channels.ThresholdKind` is ``WARNING_LOW_ONLY``).

Every property is read-write so observers probing writability see the same
permissions as before, even though this service is the only intended writer
of ``Value``.  External writes are announced with ``PropertiesChanged`` like
the service's own updates.

Typical usage (via :func:`~iio_hwmon.service.serve`)::

    exposition = SensorExposition(bus)
    exposition.register_all(registry)
    exposition.publish_value(registry[0], 12.03)
"""

# No ``from __future__ import annotations`` here: dbus-fast reads the D-Bus
# signature strings ("d") straight from the annotations.

import logging
from dataclasses import dataclass
from typing import Protocol, Union

from dbus_fast.constants import PropertyAccess
from dbus_fast.service import ServiceInterface, dbus_property

from .channels import Channel, ChannelRegistry, ThresholdKind
from .constants import (
    CRITICAL_THRESHOLD_INTERFACE,
    SENSOR_PATH_PREFIX,
    SENTINEL_VALUE,
    VALUE_INTERFACE,
)
from .exceptions import RegistrationError

logger = logging.getLogger(__name__)


class ExportTarget(Protocol):
    """The part of :class:`dbus_fast.aio.MessageBus` this layer needs."""

    def export(self, path: str, interface: ServiceInterface) -> None: ...


# ---------------------------------------------------------------------------
# D-Bus interfaces
# ---------------------------------------------------------------------------


class SensorValueInterface(ServiceInterface):
    """``xyz.openbmc_project.Sensor.Value`` for one channel."""

    def __init__(self, sensor_name: str, initial: float = SENTINEL_VALUE) -> None:
        super().__init__(VALUE_INTERFACE)
        self.sensor_name = sensor_name
        self._value = float(initial)

    @dbus_property(access=PropertyAccess.READWRITE)
    def Value(self) -> "d":  # noqa: N802
        return self._value

    @Value.setter
    def Value(self, value: "d"):  # noqa: N802
        logger.debug("External write %s.Value = %r", self.sensor_name, value)
        self._value = value
        self.emit_properties_changed({"Value": self._value})

    def update(self, value: float) -> None:
        """Set ``Value`` locally and emit ``PropertiesChanged``."""
        self._value = float(value)
        self.emit_properties_changed({"Value": self._value})


class _ThresholdInterface(ServiceInterface):
    """Shared ``CriticalLow`` property of both threshold variants."""

    def __init__(self, sensor_name: str, critical_low: float) -> None:
        super().__init__(CRITICAL_THRESHOLD_INTERFACE)
        self.sensor_name = sensor_name
        self._critical_low = float(critical_low)

    @dbus_property(access=PropertyAccess.READWRITE)
    def CriticalLow(self) -> "d":  # noqa: N802
        return self._critical_low

    @CriticalLow.setter
    def CriticalLow(self, value: "d"):  # noqa: N802
        logger.debug("External write %s.CriticalLow = %r", self.sensor_name, value)
        self._critical_low = value
        self.emit_properties_changed({"CriticalLow": self._critical_low})


class CriticalThresholdInterface(_ThresholdInterface):
    """Threshold object for standard channels: ``CriticalHigh`` + ``CriticalLow``."""

    def __init__(self, sensor_name: str, critical_high: float, critical_low: float) -> None:
        super().__init__(sensor_name, critical_low)
        self._critical_high = float(critical_high)

    @dbus_property(access=PropertyAccess.READWRITE)
    def CriticalHigh(self) -> "d":  # noqa: N802
        return self._critical_high

    @CriticalHigh.setter
    def CriticalHigh(self, value: "d"):  # noqa: N802
        logger.debug("External write %s.CriticalHigh = %r", self.sensor_name, value)
        self._critical_high = value
        self.emit_properties_changed({"CriticalHigh": self._critical_high})


class WarningLowThresholdInterface(_ThresholdInterface):
    """Threshold object for battery-style channels: ``WarningLow`` + ``CriticalLow``."""

    def __init__(self, sensor_name: str, warning_low: float, critical_low: float) -> None:
        super().__init__(sensor_name, critical_low)
        self._warning_low = float(warning_low)

    @dbus_property(access=PropertyAccess.READWRITE)
    def WarningLow(self) -> "d":  # noqa: N802
        return self._warning_low

    @WarningLow.setter
    def WarningLow(self, value: "d"):  # noqa: N802
        logger.debug("External write %s.WarningLow = %r", self.sensor_name, value)
        self._warning_low = value
        self.emit_properties_changed({"WarningLow": self._warning_low})


ThresholdInterface = Union[CriticalThresholdInterface, WarningLowThresholdInterface]


def threshold_interface_for(channel: Channel) -> ThresholdInterface:
    """Build the threshold interface matching *channel*'s threshold kind."""
    if channel.threshold_kind is ThresholdKind.WARNING_LOW_ONLY:
        return WarningLowThresholdInterface(channel.name, channel.warning_low, channel.crit_min)
    return CriticalThresholdInterface(channel.name, channel.crit_max, channel.crit_min)


# ---------------------------------------------------------------------------
# Exposition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChannelHandles:
    """The two exported objects belonging to one channel."""

    path: str
    value_iface: SensorValueInterface
    threshold_iface: ThresholdInterface


class SensorExposition:
    """Registers channels on a bus and pushes fresh values to them.

    Args:
        bus: A connected :class:`dbus_fast.aio.MessageBus` (or anything with
            a compatible ``export`` method).
        path_prefix: Object-path prefix; the channel name is appended.
    """

    def __init__(self, bus: ExportTarget, path_prefix: str = SENSOR_PATH_PREFIX) -> None:
        self._bus = bus
        self._prefix = path_prefix.rstrip("/")
        self._handles: dict[int, ChannelHandles] = {}

    def path_for(self, channel: Channel) -> str:
        """Object path for *channel*, e.g. ``.../sensors/voltage/VBAT``."""
        return f"{self._prefix}/{channel.name}"

    # -- Registration -------------------------------------------------------

    def register_channel(self, channel: Channel) -> ChannelHandles:
        """Export the value and threshold objects for *channel*.

        Raises:
            RegistrationError: If *channel* is already registered.
        """
        if channel.index in self._handles:
            raise RegistrationError(f"Channel {channel.label} is already registered")

        path = self.path_for(channel)
        value_iface = SensorValueInterface(channel.name)
        self._bus.export(path, value_iface)

        threshold_iface = threshold_interface_for(channel)
        self._bus.export(path, threshold_iface)

        handles = ChannelHandles(path, value_iface, threshold_iface)
        self._handles[channel.index] = handles
        logger.info(
            "Registered %s at %s (%s thresholds)", channel.name, path, channel.threshold_kind.value
        )
        return handles

    def register_all(self, registry: ChannelRegistry) -> None:
        """Register every channel of *registry* in order."""
        for channel in registry:
            self.register_channel(channel)

    def handles(self, channel: Channel) -> ChannelHandles:
        """Return the exported objects for *channel*.

        Raises:
            RegistrationError: If *channel* was never registered.
        """
        try:
            return self._handles[channel.index]
        except KeyError:
            raise RegistrationError(f"Channel {channel.label} is not registered") from None

    def __len__(self) -> int:
        return len(self._handles)

    # -- Publishing ---------------------------------------------------------

    def publish_value(self, channel: Channel, value: float) -> bool:
        """Best-effort update of *channel*'s ``Value`` property.

        The local property is always updated.  A failure to emit the change
        over the bus is logged and reported as ``False`` instead of raised,
        so one bad publish never stalls a sampling cycle.  Callers are free
        to ignore the result.

        Raises:
            RegistrationError: If *channel* was never registered.
        """
        handles = self.handles(channel)
        try:
            handles.value_iface.update(value)
        except Exception as exc:  # noqa: BLE001 – publishing is best effort
            logger.warning("Failed to publish %s = %.4f: %s", channel.name, value, exc)
            return False
        logger.debug("Published %s = %.4f", channel.name, value)
        return True
