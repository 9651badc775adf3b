"""Raw ADC code to voltage conversion for resistor-divider inputs."""

from __future__ import annotations

from .channels import Channel
from .constants import ADC_REFERENCE_V, ADC_STEPS

_CODES_PER_VOLT = ADC_STEPS / ADC_REFERENCE_V


def convert(channel: Channel, raw_code: int) -> float:
    """Return the voltage at the divider input for *raw_code*.

    ``(raw + 1) * (r1 + r2) / ((1024 / 1.8) * r2)``, with ``r2 == 0``
    standing for "no second resistor" and a denominator of 1.  The ``+ 1``
    offset is part of the board calibration and must stay.  No range check
    is applied.
    """
    denominator = channel.r2 if channel.r2 != 0 else 1
    return (raw_code + 1) * (channel.r1 + channel.r2) / (_CODES_PER_VOLT * denominator)
