"""Coordinator for the MCZ Maestro integration."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any, assert_never

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .capabilities import (
    CAPABILITY_SENSORS,
    Capability,
    StoveData,
    build_command,
    project_snapshots,
)
from .const import DEFAULT_SCAN_INTERVAL, DOMAIN, RECONCILE_DELAY
from .exceptions import CommandFailedError, MaestroError
from .registry import SensorRegistry
from .transport import (
    ActiveTransport,
    CloudTransport,
    LegacyTransport,
    LocalTransport,
    MaestroTransport,
)

if TYPE_CHECKING:
    import httpx
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .models import Appliance

_LOGGER = logging.getLogger(__name__)


class MaestroCoordinator(DataUpdateCoordinator[StoveData]):
    """Coordinator that polls a stove and sends its commands.

    Commands are not serialized against polling: the most recent reading
    wins, and every command is followed by one reconciliation read.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        transport: ActiveTransport,
        appliance: Appliance,
        scan_interval: int = DEFAULT_SCAN_INTERVAL,
        http_session: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            hass: Home Assistant instance.
            config_entry: Config entry owning the stove.
            transport: Transport picked for the stove.
            appliance: Stove being driven.
            scan_interval: Seconds between two polls.
            http_session: HTTP client owned by the entry, closed on shutdown.

        """
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=f"{DOMAIN}_{appliance.id}",
            update_interval=timedelta(seconds=scan_interval),
        )
        self.transport = transport
        self.appliance = appliance
        self.registry = SensorRegistry.for_transport(transport)
        self._http_session = http_session
        self._reconcile_task: asyncio.Task[None] | None = None

    @property
    def client(self) -> MaestroTransport:
        """Return the client commands are sent through."""
        match self.transport:
            case CloudTransport(client=client) | LocalTransport(client=client):
                return client
            case LegacyTransport(client=client):
                return client
            case _:
                assert_never(self.transport)

    @property
    def reader(self) -> MaestroTransport:
        """Return the client readings are fetched through."""
        match self.transport:
            case LegacyTransport(telemetry=telemetry) if telemetry is not None:
                return telemetry
            case _:
                return self.client

    async def _async_update_data(self) -> StoveData:
        """Fetch status and state and project them onto capabilities."""
        try:
            status, state = await asyncio.gather(
                self.reader.async_get_status(self.appliance),
                self.reader.async_get_state(self.appliance),
            )
        except MaestroError as err:
            update_error = f"Update failed: {err}"
            raise UpdateFailed(update_error) from err

        _LOGGER.debug(
            "Polled %s: %d status and %d state readings",
            self.appliance.name,
            len(status.sensors),
            len(state.sensors),
        )
        return project_snapshots(status, state, self.data)

    def supports(self, capability: Capability) -> bool:
        """Return True if the stove exposes the sensor behind a capability."""
        return any(
            self.registry.supports(sensor_name)
            for sensor_name in CAPABILITY_SENSORS[capability]
        )

    async def async_execute_command(
        self,
        capability: Capability,
        value: Any,  # noqa: ANN401
    ) -> None:
        """Send a capability change and show its result right away.

        Args:
            capability: Capability to change.
            value: New capability value.

        Raises:
            ValueError: If the value is not valid for the capability.
            SensorNotFoundError: If an essential sensor is unknown.
            CommandFailedError: If the stove cannot be reached.

        """
        command = build_command(capability, value)
        sensor = self.registry.resolve(command.sensor_name, essential=command.essential)
        if sensor is None:
            _LOGGER.debug("%s not supported by %s", capability, self.appliance.name)
            return

        _LOGGER.debug(
            "Setting %s of %s to %s (%s=%s)",
            capability,
            self.appliance.name,
            value,
            command.sensor_name,
            command.value,
        )
        try:
            await self.client.async_send_command(self.appliance, sensor, command.value)
        except CommandFailedError as err:
            if err.connection_lost:
                _LOGGER.warning("Connection to %s lost: %s", self.appliance.name, err)
                self.last_update_success = False
                self.async_update_listeners()
            raise

        self.data = command.apply(self.data or StoveData())
        self.async_update_listeners()
        self._schedule_reconcile()

    def _schedule_reconcile(self) -> None:
        """Re-read the stove once it has had time to apply a command."""
        if self._reconcile_task is not None and not self._reconcile_task.done():
            self._reconcile_task.cancel()
        self._reconcile_task = asyncio.create_task(self._async_reconcile())

    async def _async_reconcile(self) -> None:
        await asyncio.sleep(RECONCILE_DELAY)
        await self.async_refresh()

    async def async_shutdown_transport(self) -> None:
        """Stop pending work and close the transport."""
        if self._reconcile_task is not None and not self._reconcile_task.done():
            self._reconcile_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reconcile_task
        self._reconcile_task = None

        await self.client.async_disconnect()
        match self.transport:
            case LegacyTransport(telemetry=telemetry) if telemetry is not None:
                await telemetry.async_disconnect()
            case _:
                pass

        if self._http_session is not None:
            await self._http_session.aclose()
            self._http_session = None
