"""Shared pytest fixtures for iio-hwmon tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from iio_hwmon import ChannelRegistry, ChannelSpec, ReadError, ThresholdKind, default_registry
from iio_hwmon.exposition import SensorExposition


class FakeBus:
    """Stand-in for :class:`dbus_fast.aio.MessageBus`.

    Records every ``export`` call.  Exporting the same interface name twice
    on one path raises ``ValueError``, as the real bus does.
    """

    def __init__(self) -> None:
        self.exported: list[tuple[str, object]] = []

    def export(self, path: str, interface) -> None:
        for p, iface in self.exported:
            if p == path and iface.name == interface.name:
                raise ValueError(f"{interface.name} already exported at {path}")
        self.exported.append((path, interface))

    # -- Helpers for tests --------------------------------------------------

    def interfaces_at(self, path: str) -> dict[str, object]:
        return {iface.name: iface for p, iface in self.exported if p == path}

    @property
    def paths(self) -> list[str]:
        return sorted({p for p, _ in self.exported})


class FakeReader:
    """Scripted raw-code source.

    ``codes`` maps channel index to either a raw code or an exception to
    raise.  Missing indices raise :class:`ReadError`.  Every read is logged
    in ``calls`` and, if a clock is given, advances it by ``cost`` seconds.
    """

    def __init__(self, codes: dict[int, int | Exception] | None = None, clock=None, cost=0.0):
        self.codes: dict[int, int | Exception] = dict(codes or {})
        self.calls: list[int] = []
        self._clock = clock
        self._cost = cost

    def read(self, index: int) -> int:
        self.calls.append(index)
        if self._clock is not None:
            self._clock.now += self._cost
        code = self.codes.get(index)
        if code is None:
            raise ReadError(index, f"fake{index}_raw", "no such file")
        if isinstance(code, Exception):
            raise code
        return code


class FakeClock:
    """Monotonic clock plus a matching ``sleep`` coroutine that advances it."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []
        self.wakeups: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay
        self.wakeups.append(self.now)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

SMALL_TABLE = (
    ChannelSpec("PLUS12V", 12.9, 11.16, 8.2, 1.0),
    ChannelSpec("PVCCIN_CPU0", 2.04, 1.56, 1.0, 3.0),
    ChannelSpec("VBAT", 0, 2.5, 787.0, 402.0, ThresholdKind.WARNING_LOW_ONLY),
    ChannelSpec("P1V05_PCH", 1.11, 0.99, 1.0, 0),
)


@pytest.fixture()
def registry() -> ChannelRegistry:
    """Four-channel registry covering every calibration shape."""
    return ChannelRegistry.from_specs(SMALL_TABLE)


@pytest.fixture()
def board_registry() -> ChannelRegistry:
    """The full sixteen-channel reference board."""
    return default_registry()


@pytest.fixture()
def fake_bus() -> FakeBus:
    return FakeBus()


@pytest.fixture()
def exposition(fake_bus: FakeBus, registry: ChannelRegistry) -> SensorExposition:
    """Exposition with every channel of ``registry`` registered."""
    expo = SensorExposition(fake_bus)
    expo.register_all(registry)
    return expo


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def sysfs(tmp_path: Path) -> Path:
    """Directory standing in for ``/sys/bus/iio/devices/iio:device0``."""
    device = tmp_path / "iio:device0"
    device.mkdir()
    return device


def write_raw(device: Path, index: int, content: str) -> Path:
    """Write ``in_voltage<index>_raw`` under *device*."""
    path = device / f"in_voltage{index}_raw"
    path.write_text(content)
    return path
