"""
Tests for the object exposition layer.

Covers:
* One value object and one threshold object per channel, unique paths
* CriticalHigh vs WarningLow selection
* Sentinel initial value and read-write properties
* Best-effort publishing
"""

from __future__ import annotations

from unittest.mock import call, patch

import pytest
from conftest import FakeBus

from iio_hwmon import SENTINEL_VALUE, RegistrationError
from iio_hwmon.constants import CRITICAL_THRESHOLD_INTERFACE, SENSOR_PATH_PREFIX, VALUE_INTERFACE
from iio_hwmon.exposition import (
    CriticalThresholdInterface,
    SensorExposition,
    SensorValueInterface,
    WarningLowThresholdInterface,
)

# ══════════════════════════════════════════════════════════════════════════
#  Registration
# ══════════════════════════════════════════════════════════════════════════


class TestRegistration:
    def test_two_objects_per_channel(self, exposition, fake_bus, registry):
        assert len(fake_bus.exported) == 2 * len(registry)
        assert len(exposition) == len(registry)

    def test_paths_unique_and_named(self, exposition, fake_bus, registry):
        assert fake_bus.paths == sorted(f"{SENSOR_PATH_PREFIX}/{ch.name}" for ch in registry)

    def test_interfaces_at_each_path(self, exposition, fake_bus, registry):
        for ch in registry:
            ifaces = fake_bus.interfaces_at(exposition.path_for(ch))
            assert set(ifaces) == {VALUE_INTERFACE, CRITICAL_THRESHOLD_INTERFACE}

    def test_full_board(self, fake_bus, board_registry):
        expo = SensorExposition(fake_bus)
        expo.register_all(board_registry)
        assert len(fake_bus.paths) == 16
        assert len(fake_bus.exported) == 32

    def test_value_starts_at_sentinel(self, exposition, registry):
        for ch in registry:
            assert exposition.handles(ch).value_iface.Value == SENTINEL_VALUE

    def test_register_twice_rejected(self, exposition, fake_bus, registry):
        with pytest.raises(RegistrationError, match="already registered"):
            exposition.register_channel(registry[0])
        assert len(fake_bus.exported) == 2 * len(registry)

    def test_custom_prefix(self, fake_bus, registry):
        expo = SensorExposition(fake_bus, path_prefix="/test/sensors/")
        handles = expo.register_channel(registry[0])
        assert handles.path == "/test/sensors/PLUS12V"

    def test_handles_for_unregistered_channel(self, fake_bus, registry):
        expo = SensorExposition(fake_bus)
        with pytest.raises(RegistrationError, match="not registered"):
            expo.handles(registry[0])


class TestThresholds:
    def test_standard_channel_exposes_critical_high(self, exposition, registry):
        iface = exposition.handles(registry.by_name("PLUS12V")).threshold_iface
        assert isinstance(iface, CriticalThresholdInterface)
        assert iface.CriticalHigh == 12.9
        assert iface.CriticalLow == 11.16
        assert not hasattr(iface, "WarningLow")

    def test_vbat_exposes_warning_low_instead(self, exposition, registry):
        iface = exposition.handles(registry.by_name("VBAT")).threshold_iface
        assert isinstance(iface, WarningLowThresholdInterface)
        assert iface.WarningLow == 2.6
        assert iface.CriticalLow == 2.5
        assert not hasattr(iface, "CriticalHigh")

    def test_every_channel_has_critical_low(self, fake_bus, board_registry):
        expo = SensorExposition(fake_bus)
        expo.register_all(board_registry)
        for ch in board_registry:
            assert expo.handles(ch).threshold_iface.CriticalLow == ch.crit_min

    def test_only_vbat_lacks_critical_high(self, fake_bus, board_registry):
        expo = SensorExposition(fake_bus)
        expo.register_all(board_registry)
        without = [
            ch.name
            for ch in board_registry
            if not hasattr(expo.handles(ch).threshold_iface, "CriticalHigh")
        ]
        assert without == ["VBAT"]

    def test_thresholds_are_writable(self, exposition, registry):
        iface = exposition.handles(registry[0]).threshold_iface
        iface.CriticalHigh = 13.5
        assert iface.CriticalHigh == 13.5

    def test_threshold_write_emits_properties_changed(self, exposition, registry):
        iface = exposition.handles(registry.by_name("PLUS12V")).threshold_iface
        with patch.object(CriticalThresholdInterface, "emit_properties_changed") as emit:
            iface.CriticalHigh = 13.5
            iface.CriticalLow = 10.8
        assert emit.call_args_list == [
            call({"CriticalHigh": 13.5}),
            call({"CriticalLow": 10.8}),
        ]

    def test_warning_low_write_emits_properties_changed(self, exposition, registry):
        iface = exposition.handles(registry.by_name("VBAT")).threshold_iface
        with patch.object(WarningLowThresholdInterface, "emit_properties_changed") as emit:
            iface.WarningLow = 2.7
        emit.assert_called_once_with({"WarningLow": 2.7})


# ══════════════════════════════════════════════════════════════════════════
#  Publishing
# ══════════════════════════════════════════════════════════════════════════


class TestPublish:
    def test_sets_value(self, exposition, registry):
        assert exposition.publish_value(registry[1], 0.7058) is True
        assert exposition.handles(registry[1]).value_iface.Value == pytest.approx(0.7058)

    def test_other_channels_untouched(self, exposition, registry):
        exposition.publish_value(registry[1], 1.5)
        assert exposition.handles(registry[0]).value_iface.Value == SENTINEL_VALUE

    def test_emits_properties_changed(self, exposition, registry):
        iface = exposition.handles(registry[0]).value_iface
        with patch.object(SensorValueInterface, "emit_properties_changed") as emit:
            exposition.publish_value(registry[0], 12.1)
        emit.assert_called_once_with({"Value": 12.1})
        assert iface.Value == 12.1

    def test_bus_failure_is_swallowed(self, exposition, registry, caplog):
        with patch.object(
            SensorValueInterface, "emit_properties_changed", side_effect=RuntimeError("bus gone")
        ):
            assert exposition.publish_value(registry[0], 12.1) is False
        assert "Failed to publish PLUS12V" in caplog.text

    def test_unregistered_channel_raises(self, registry):
        expo = SensorExposition(FakeBus())
        with pytest.raises(RegistrationError):
            expo.publish_value(registry[0], 1.0)

    def test_external_write_accepted(self, exposition, registry):
        iface = exposition.handles(registry[0]).value_iface
        iface.Value = 1.23
        assert iface.Value == 1.23

    def test_external_write_emits_properties_changed(self, exposition, registry):
        iface = exposition.handles(registry[0]).value_iface
        with patch.object(SensorValueInterface, "emit_properties_changed") as emit:
            iface.Value = 1.23
        emit.assert_called_once_with({"Value": 1.23})
