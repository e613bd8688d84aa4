"""Eco mode switch for MCZ Maestro stoves."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.switch import SwitchEntity

from .capabilities import Capability
from .const import DOMAIN
from .entity import MaestroEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import MaestroCoordinator


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the eco switch when the stove has an eco mode."""
    coordinator: MaestroCoordinator = hass.data[DOMAIN][entry.entry_id]
    if coordinator.supports(Capability.ECO_MODE):
        async_add_entities([MaestroEcoSwitch(coordinator)])


class MaestroEcoSwitch(MaestroEntity, SwitchEntity):
    """Eco mode of a stove."""

    _attr_translation_key = "eco_mode"

    def __init__(self, coordinator: MaestroCoordinator) -> None:
        super().__init__(coordinator, str(Capability.ECO_MODE))

    @property
    def is_on(self) -> bool | None:
        data = self.coordinator.data
        return data.eco_mode if data is not None else None

    async def async_turn_on(self, **kwargs: Any) -> None:  # noqa: ANN401, ARG002
        await self._async_execute(Capability.ECO_MODE, True)  # noqa: FBT003

    async def async_turn_off(self, **kwargs: Any) -> None:  # noqa: ANN401, ARG002
        await self._async_execute(Capability.ECO_MODE, False)  # noqa: FBT003
