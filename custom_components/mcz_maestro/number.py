"""Number entities for MCZ Maestro fan speeds and power level."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeassistant.components.number import NumberEntity, NumberEntityDescription, NumberMode

from .capabilities import Capability
from .const import DOMAIN, FAN_SPEED_MAX, FAN_SPEED_MIN, POWER_LEVEL_MAX, POWER_LEVEL_MIN
from .entity import MaestroEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import MaestroCoordinator


@dataclass(frozen=True, kw_only=True)
class MaestroNumberDescription(NumberEntityDescription):
    """Number bound to a stove capability."""

    capability: Capability


NUMBER_DESCRIPTIONS = tuple(
    MaestroNumberDescription(
        key=str(capability),
        translation_key=str(capability),
        capability=capability,
        native_min_value=FAN_SPEED_MIN,
        native_max_value=FAN_SPEED_MAX,
        native_step=1,
        mode=NumberMode.SLIDER,
    )
    for capability in (
        Capability.FAN_SPEED_1,
        Capability.FAN_SPEED_2,
        Capability.FAN_SPEED_3,
    )
) + (
    MaestroNumberDescription(
        key=str(Capability.POWER_LEVEL),
        translation_key=str(Capability.POWER_LEVEL),
        capability=Capability.POWER_LEVEL,
        native_min_value=POWER_LEVEL_MIN,
        native_max_value=POWER_LEVEL_MAX,
        native_step=1,
        mode=NumberMode.SLIDER,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up numbers for the capabilities the stove supports."""
    coordinator: MaestroCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        MaestroNumberEntity(coordinator, description)
        for description in NUMBER_DESCRIPTIONS
        if coordinator.supports(description.capability)
    )


class MaestroNumberEntity(MaestroEntity, NumberEntity):
    """Fan speed or power level of a stove."""

    entity_description: MaestroNumberDescription

    def __init__(
        self,
        coordinator: MaestroCoordinator,
        description: MaestroNumberDescription,
    ) -> None:
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> float | None:
        data = self.coordinator.data
        if data is None:
            return None
        return getattr(data, self.entity_description.key)

    async def async_set_native_value(self, value: float) -> None:
        await self._async_execute(self.entity_description.capability, int(value))
