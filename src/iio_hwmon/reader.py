"""
Raw sample reader for IIO voltage channels.

The kernel exposes each ADC input as a text file holding one integer,
``<base_path><index>_raw``, e.g.
``/sys/bus/iio/devices/iio:device0/in_voltage3_raw``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .constants import DEFAULT_BASE_PATH
from .exceptions import ReadError

logger = logging.getLogger(__name__)


def raw_path(base_path: str, index: int) -> str:
    """Return the raw file path for channel *index*."""
    return f"{base_path}{index}_raw"


def read_raw(base_path: str, index: int) -> int:
    """Read and parse the raw ADC code for channel *index*.

    Only the first whitespace-delimited token is parsed.

    Raises:
        ReadError: If the file is missing, unreadable, empty, or its first
            token is not an integer.
    """
    path = raw_path(base_path, index)
    try:
        text = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(index, path, str(exc)) from exc

    tokens = text.split()
    if not tokens:
        raise ReadError(index, path, "file is empty")
    try:
        return int(tokens[0])
    except ValueError as exc:
        raise ReadError(index, path, f"not an integer: {tokens[0]!r}") from exc


class RawSampleReader:
    """Reads raw codes for channels under a fixed base path.

    Args:
        base_path: Path prefix that the channel index and ``_raw`` are
            appended to.
    """

    def __init__(self, base_path: str = DEFAULT_BASE_PATH) -> None:
        self.base_path = base_path

    def read(self, index: int) -> int:
        """Return the raw code for channel *index* (see :func:`read_raw`)."""
        value = read_raw(self.base_path, index)
        logger.debug("RAW %s: %d", raw_path(self.base_path, index), value)
        return value
