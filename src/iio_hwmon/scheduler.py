"""
Sampling scheduler: the fixed-period read → convert → publish loop.

Each tick runs one *cycle* over every channel in registry order.  Deadlines
advance by exactly one interval from the previous deadline, never from "now",
so a slow cycle does not push later ticks back.

A read failure on any channel aborts the rest of that cycle (channels after
it keep their previous value) and the loop carries on with the next tick.  A
raw reading of zero means the ADC has not settled yet: that channel is
skipped for the cycle and its last value stays published.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Protocol

from .channels import ChannelRegistry
from .constants import SAMPLE_INTERVAL_S
from .conversion import convert
from .exceptions import ReadError
from .exposition import SensorExposition

logger = logging.getLogger(__name__)


class SampleSource(Protocol):
    """Anything that returns a raw code for a channel index."""

    def read(self, index: int) -> int: ...


class SchedulerState(Enum):
    IDLE = "idle"
    SAMPLING = "sampling"


@dataclass
class CycleReport:
    """Outcome of one sampling cycle."""

    published: list[tuple[str, float]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed_index: int | None = None

    @property
    def aborted(self) -> bool:
        return self.failed_index is not None

    @property
    def summary(self) -> str:
        text = f"{len(self.published)} published, {len(self.skipped)} skipped"
        if self.aborted:
            text += f", aborted at channel {self.failed_index}"
        return text


class SamplingScheduler:
    """Drives the periodic sampling cycle.

    Args:
        registry: Channels to sample, in index order.
        reader: Source of raw codes, usually a
            :class:`~iio_hwmon.reader.RawSampleReader`.
        exposition: Where converted values are published.
        interval: Seconds between deadlines.
        clock: Monotonic clock in seconds.  Defaults to the running event
            loop's ``time()``.
        sleep: Coroutine function used to wait.  Defaults to
            :func:`asyncio.sleep`.
    """

    def __init__(
        self,
        registry: ChannelRegistry,
        reader: SampleSource,
        exposition: SensorExposition,
        interval: float = SAMPLE_INTERVAL_S,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.registry = registry
        self.reader = reader
        self.exposition = exposition
        self.interval = interval
        self._clock = clock
        self._sleep = sleep or asyncio.sleep
        self.state = SchedulerState.IDLE
        self.cycles = 0
        self.next_deadline: float | None = None

    # -- One cycle ----------------------------------------------------------

    def run_cycle(self) -> CycleReport:
        """Read, convert and publish every channel once.

        Never raises on read failures; see the module docstring for the
        abort and skip rules.
        """
        self.state = SchedulerState.SAMPLING
        report = CycleReport()
        try:
            for channel in self.registry:
                try:
                    raw = self.reader.read(channel.index)
                except ReadError as exc:
                    logger.error("Failed to read value for id %d: %s", channel.index, exc)
                    report.failed_index = channel.index
                    break

                if raw == 0:
                    logger.debug(
                        "%s reads 0, keeping %.4f",
                        channel.name,
                        self.registry.last_value(channel.index),
                    )
                    report.skipped.append(channel.name)
                    continue

                value = convert(channel, raw)
                self.registry.record_value(channel.index, value)
                self.exposition.publish_value(channel, value)
                report.published.append((channel.name, value))
        finally:
            self.state = SchedulerState.IDLE

        self.cycles += 1
        logger.debug("Cycle %d: %s", self.cycles, report.summary)
        return report

    # -- Loop ---------------------------------------------------------------

    async def run(self, max_cycles: int | None = None) -> None:
        """Run cycles on a fixed period until cancelled.

        The first cycle fires one interval after the call.  The n-th
        deadline is ``start + n * interval`` however long each cycle takes;
        if a cycle overruns, the next one starts immediately.

        Args:
            max_cycles: Stop after this many cycles (``None`` runs forever).
        """
        clock = self._clock or asyncio.get_running_loop().time
        self.next_deadline = clock() + self.interval
        logger.info("Sampling %d channels every %.1f s", len(self.registry), self.interval)

        done = 0
        while max_cycles is None or done < max_cycles:
            await self._sleep(max(0.0, self.next_deadline - clock()))
            self.run_cycle()
            done += 1
            self.next_deadline += self.interval
