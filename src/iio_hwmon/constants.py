"""Shared runtime constants for the IIO hardware-monitor service.

This is the canonical source of truth for bus names, object paths, ADC
calibration constants and scheduler defaults.  Other modules should import
from here rather than defining their own copies.
"""

# ---------------------------------------------------------------------------
# D-Bus identity
# ---------------------------------------------------------------------------

BUS_NAME = "xyz.openbmc_project.Hwmon.IIO"
SENSOR_PATH_PREFIX = "/xyz/openbmc_project/sensors/voltage"
VALUE_INTERFACE = "xyz.openbmc_project.Sensor.Value"
CRITICAL_THRESHOLD_INTERFACE = "xyz.openbmc_project.Sensor.Threshold.Critical"

# ---------------------------------------------------------------------------
# ADC / calibration
# ---------------------------------------------------------------------------

ADC_STEPS = 1024  # 10-bit converter
ADC_REFERENCE_V = 1.8
SENTINEL_VALUE = 88.88  # Published until the first good sample
VBAT_WARNING_LOW = 2.6

# ---------------------------------------------------------------------------
# Service / runtime defaults
# ---------------------------------------------------------------------------

DEFAULT_BASE_PATH = "/sys/bus/iio/devices/iio:device0/in_voltage"
SAMPLE_INTERVAL_S = 2.0
