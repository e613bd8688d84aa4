"""Read-only sensors for MCZ Maestro stoves."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import UnitOfTemperature

from .capabilities import StoveData
from .const import DOMAIN, STOVE_PHASES
from .entity import MaestroEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import MaestroCoordinator


@dataclass(frozen=True, kw_only=True)
class MaestroSensorDescription(SensorEntityDescription):
    """Sensor reading one StoveData field."""

    value_fn: Callable[[StoveData], Any]


SENSOR_DESCRIPTIONS = (
    MaestroSensorDescription(
        key="exhaust_temperature",
        translation_key="exhaust_temperature",
        device_class=SensorDeviceClass.TEMPERATURE,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
        value_fn=lambda data: data.exhaust_temperature,
    ),
    MaestroSensorDescription(
        key="water_temperature",
        translation_key="water_temperature",
        device_class=SensorDeviceClass.TEMPERATURE,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
        value_fn=lambda data: data.water_temperature,
    ),
    MaestroSensorDescription(
        key="stove_phase",
        translation_key="stove_phase",
        device_class=SensorDeviceClass.ENUM,
        options=list(STOVE_PHASES.values()),
        value_fn=lambda data: data.stove_phase,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the read-only sensors of a stove."""
    coordinator: MaestroCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        MaestroSensorEntity(coordinator, description)
        for description in SENSOR_DESCRIPTIONS
    )


class MaestroSensorEntity(MaestroEntity, SensorEntity):
    """Temperature or phase reading of a stove."""

    entity_description: MaestroSensorDescription

    def __init__(
        self,
        coordinator: MaestroCoordinator,
        description: MaestroSensorDescription,
    ) -> None:
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> Any:  # noqa: ANN401
        data = self.coordinator.data
        if data is None:
            return None
        return self.entity_description.value_fn(data)
