"""IIO hardware-monitor: publishes ADC voltages and thresholds on D-Bus"""

from .channels import (
    DEFAULT_CHANNELS,
    Channel,
    ChannelRegistry,
    ChannelSpec,
    ThresholdKind,
    default_registry,
)
from .constants import BUS_NAME, SAMPLE_INTERVAL_S, SENTINEL_VALUE
from .conversion import convert
from .exceptions import (
    BusError,
    IIOHwmonError,
    ReadError,
    RegistrationError,
    ValidationError,
)
from .reader import RawSampleReader, read_raw

__all__ = [
    "BUS_NAME",
    "BusError",
    "Channel",
    "ChannelRegistry",
    "ChannelSpec",
    "DEFAULT_CHANNELS",
    "IIOHwmonError",
    "RawSampleReader",
    "ReadError",
    "RegistrationError",
    "SAMPLE_INTERVAL_S",
    "SENTINEL_VALUE",
    "ThresholdKind",
    "ValidationError",
    "convert",
    "default_registry",
    "read_raw",
]
__version__ = "0.1.0"
