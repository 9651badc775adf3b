"""
Exception hierarchy for the IIO hardware-monitor service.

All exceptions inherit from :class:`IIOHwmonError` so callers can catch
broadly (``except IIOHwmonError``) or narrowly (``except ReadError``).
"""

from __future__ import annotations


class IIOHwmonError(Exception):
    """Base exception for all iio-hwmon errors."""


class BusError(IIOHwmonError):
    """Raised when the bus connection or the well-known name claim fails."""


class ReadError(IIOHwmonError):
    """Raised when a channel's raw file is missing, unreadable or unparsable.

    Attributes:
        index: Channel index whose read failed.
        path: Resource that was being read.
    """

    def __init__(self, index: int, path: str, reason: str) -> None:
        super().__init__(f"Cannot read channel {index} from {path}: {reason}")
        self.index = index
        self.path = path


class RegistrationError(IIOHwmonError):
    """Raised when a channel is registered twice or published unregistered."""


class ValidationError(IIOHwmonError):
    """Raised when a channel table or config file is malformed."""
