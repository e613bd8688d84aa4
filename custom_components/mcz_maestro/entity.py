"""Base entity for MCZ Maestro stoves."""

from __future__ import annotations

from typing import Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .capabilities import Capability
from .const import DOMAIN
from .coordinator import MaestroCoordinator
from .exceptions import MaestroError


class MaestroEntity(CoordinatorEntity[MaestroCoordinator]):
    """Entity bound to one stove and its coordinator."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: MaestroCoordinator, key: str) -> None:
        super().__init__(coordinator)
        appliance = coordinator.appliance
        self._attr_unique_id = f"{appliance.id}_{key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, appliance.id)},
            name=appliance.name,
            manufacturer="MCZ",
            model=appliance.model_id or None,
            serial_number=appliance.serial_number or None,
        )

    async def _async_execute(self, capability: Capability, value: Any) -> None:  # noqa: ANN401
        """Send a capability change, reporting failures to the caller."""
        try:
            await self.coordinator.async_execute_command(capability, value)
        except (MaestroError, ValueError) as err:
            command_error = f"Failed to set {capability} to {value}: {err}"
            raise HomeAssistantError(command_error) from err
