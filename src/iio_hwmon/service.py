"""
Service bootstrap: connect to D-Bus, export every channel, claim the
well-known name, then sample forever.

Failures here are startup-fatal and surface as :class:`BusError`; once the
scheduler is running, nothing a cycle does stops the process.
"""

from __future__ import annotations

import logging

from dbus_fast.aio import MessageBus
from dbus_fast.constants import BusType, RequestNameReply
from dbus_fast.errors import AuthError, DBusError, InvalidAddressError

from .config import HwmonConfig
from .constants import BUS_NAME
from .exceptions import BusError
from .exposition import SensorExposition
from .reader import RawSampleReader
from .scheduler import SamplingScheduler

logger = logging.getLogger(__name__)

_OWNED = (RequestNameReply.PRIMARY_OWNER, RequestNameReply.ALREADY_OWNER)


async def connect_bus(bus_type: BusType = BusType.SYSTEM) -> MessageBus:
    """Open a connection to the system (or session) bus.

    Raises:
        BusError: If the bus cannot be reached or refuses authentication.
    """
    logger.info("Connecting to the %s bus", bus_type.name.lower())
    try:
        return await MessageBus(bus_type=bus_type).connect()
    except (OSError, AuthError, InvalidAddressError, DBusError) as exc:
        raise BusError(f"Cannot connect to the {bus_type.name.lower()} bus: {exc}") from exc


async def claim_name(bus: MessageBus, name: str = BUS_NAME) -> None:
    """Request *name* on *bus*.

    Raises:
        BusError: If the request fails or another process owns the name.
    """
    try:
        reply = await bus.request_name(name)
    except DBusError as exc:
        raise BusError(f"Cannot request bus name {name}: {exc}") from exc

    if reply not in _OWNED:
        raise BusError(f"Bus name {name} not acquired ({reply.name})")
    logger.info("Acquired bus name %s", name)


async def serve(
    config: HwmonConfig | None = None,
    bus_type: BusType = BusType.SYSTEM,
    max_cycles: int | None = None,
) -> None:
    """Run the hardware-monitor service.

    Objects are exported before the name is claimed so they are visible as
    soon as the name appears.

    Args:
        config: Channel table and base path (built-in board table if omitted).
        bus_type: Which bus to publish on.
        max_cycles: Stop after this many cycles (``None`` runs forever).

    Raises:
        BusError: On startup-fatal bus failures.
        ValidationError: If the channel table is inconsistent.
    """
    config = config or HwmonConfig()
    registry = config.registry()

    bus = await connect_bus(bus_type)
    try:
        exposition = SensorExposition(bus)
        exposition.register_all(registry)
        await claim_name(bus)

        scheduler = SamplingScheduler(registry, RawSampleReader(config.base_path), exposition)
        await scheduler.run(max_cycles)
    finally:
        bus.disconnect()
        logger.info("Disconnected from the bus")
