"""Climate entity for MCZ Maestro stoves.

The climate entity carries the three capabilities every stove has: power,
target temperature and thermostat mode (exposed as presets).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature

from .capabilities import Capability
from .const import DOMAIN, THERMOSTAT_MODE_MAP
from .entity import MaestroEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import MaestroCoordinator

MIN_TEMPERATURE = 5.0
MAX_TEMPERATURE = 35.0

HEATING_PHASES = {"starting", "preheating", "ignition", "heating"}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the climate entity of a stove."""
    coordinator: MaestroCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([MaestroClimateEntity(coordinator)])


class MaestroClimateEntity(MaestroEntity, ClimateEntity):
    """Climate entity for an MCZ Maestro stove."""

    _attr_name = None
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_target_temperature_step = 0.5
    _attr_min_temp = MIN_TEMPERATURE
    _attr_max_temp = MAX_TEMPERATURE
    _attr_hvac_modes = [HVACMode.OFF, HVACMode.HEAT]
    _attr_preset_modes = list(THERMOSTAT_MODE_MAP)
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.PRESET_MODE
        | ClimateEntityFeature.TURN_OFF
        | ClimateEntityFeature.TURN_ON
    )

    def __init__(self, coordinator: MaestroCoordinator) -> None:
        """Initialize the climate entity."""
        super().__init__(coordinator, "climate")

    @property
    def hvac_mode(self) -> HVACMode:
        """Return heat when the stove is on."""
        data = self.coordinator.data
        return HVACMode.HEAT if data is not None and data.power_on else HVACMode.OFF

    @property
    def hvac_action(self) -> HVACAction | None:
        """Return what the stove is doing, derived from its phase."""
        data = self.coordinator.data
        if data is None or data.stove_phase is None:
            return None
        if data.stove_phase == "off":
            return HVACAction.OFF
        if data.stove_phase in HEATING_PHASES:
            return HVACAction.HEATING
        return HVACAction.IDLE

    @property
    def current_temperature(self) -> float | None:
        """Return the ambient temperature."""
        data = self.coordinator.data
        return data.current_temperature if data is not None else None

    @property
    def target_temperature(self) -> float | None:
        """Return the temperature setpoint."""
        data = self.coordinator.data
        return data.target_temperature if data is not None else None

    @property
    def preset_mode(self) -> str | None:
        """Return the thermostat mode."""
        data = self.coordinator.data
        return data.thermostat_mode if data is not None else None

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Turn the stove on (heat) or off.

        Args:
            hvac_mode: The HVAC mode to set.

        """
        await self._async_execute(Capability.ONOFF, hvac_mode == HVACMode.HEAT)

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the target temperature.

        Args:
            **kwargs: Keyword arguments containing temperature data.

        """
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        await self._async_execute(Capability.TARGET_TEMPERATURE, temperature)

    async def async_set_preset_mode(self, preset_mode: str) -> None:
        """Set the thermostat mode."""
        await self._async_execute(Capability.THERMOSTAT_MODE, preset_mode)

    async def async_turn_on(self) -> None:
        await self.async_set_hvac_mode(HVACMode.HEAT)

    async def async_turn_off(self) -> None:
        await self.async_set_hvac_mode(HVACMode.OFF)
