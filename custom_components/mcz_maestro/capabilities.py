"""Mapping between stove capabilities and sensor readings or writes."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

from .const import (
    POWER_OFF_VALUE,
    POWER_ON_VALUE,
    SENSOR_ALARM,
    SENSOR_ECO_START,
    SENSOR_ECO_STOP,
    SENSOR_FAN1,
    SENSOR_FAN2,
    SENSOR_FAN3,
    SENSOR_MODE,
    SENSOR_POWER,
    SENSOR_POWER_COMMAND,
    SENSOR_POWER_LEVEL,
    SENSOR_SET_TEMP_AMB1,
    SENSOR_TEMP_AMBIENT,
    SENSOR_TEMP_AMBIENT_INSTALL,
    SENSOR_TEMP_EXHAUST,
    SENSOR_TEMP_WATER,
    STOVE_PHASES,
    THERMOSTAT_MODE_MAP,
    THERMOSTAT_MODE_REVERSE_MAP,
)
from .models import StoveState, StoveStatus


class Capability(StrEnum):
    """Controllable features of a stove."""

    ONOFF = "onoff"
    TARGET_TEMPERATURE = "target_temperature"
    THERMOSTAT_MODE = "thermostat_mode"
    FAN_SPEED_1 = "fan_speed_1"
    FAN_SPEED_2 = "fan_speed_2"
    FAN_SPEED_3 = "fan_speed_3"
    ECO_MODE = "eco_mode"
    POWER_LEVEL = "power_level"


# A stove that cannot resolve one of these cannot be driven at all
ESSENTIAL_CAPABILITIES = frozenset(
    {Capability.ONOFF, Capability.TARGET_TEMPERATURE, Capability.THERMOSTAT_MODE}
)

FAN_SENSORS = {
    Capability.FAN_SPEED_1: SENSOR_FAN1,
    Capability.FAN_SPEED_2: SENSOR_FAN2,
    Capability.FAN_SPEED_3: SENSOR_FAN3,
}

# Sensors written by each capability
CAPABILITY_SENSORS: dict[Capability, tuple[str, ...]] = {
    Capability.ONOFF: (SENSOR_POWER_COMMAND,),
    Capability.TARGET_TEMPERATURE: (SENSOR_SET_TEMP_AMB1,),
    Capability.THERMOSTAT_MODE: (SENSOR_MODE,),
    **{capability: (sensor,) for capability, sensor in FAN_SENSORS.items()},
    Capability.ECO_MODE: (SENSOR_ECO_START, SENSOR_ECO_STOP),
    Capability.POWER_LEVEL: (SENSOR_POWER_LEVEL,),
}


@dataclass(frozen=True, slots=True)
class StoveData:
    """Capability values of a stove as shown to Home Assistant."""

    power_on: bool = False
    current_temperature: float | None = None
    target_temperature: float | None = None
    thermostat_mode: str | None = None
    power_level: int | None = None
    alarm: bool = False
    fan_speed_1: int | None = None
    fan_speed_2: int | None = None
    fan_speed_3: int | None = None
    eco_mode: bool = False
    exhaust_temperature: float | None = None
    water_temperature: float | None = None
    stove_phase: str | None = None


@dataclass(frozen=True, slots=True)
class CapabilityCommand:
    """Sensor write implementing a capability change.

    Attributes:
        capability: Capability being changed.
        sensor_name: Sensor receiving the write.
        value: Value as sent on the wire.
        field_name: StoveData field reflecting the change.
        field_value: Value the field takes once the write is accepted.

    """

    capability: Capability
    sensor_name: str
    value: Any
    field_name: str
    field_value: Any

    @property
    def essential(self) -> bool:
        """Return True if the command must resolve to a known sensor."""
        return self.capability in ESSENTIAL_CAPABILITIES

    def apply(self, data: StoveData) -> StoveData:
        """Return ``data`` with the optimistic result of the command."""
        return replace(data, **{self.field_name: self.field_value})


def build_command(capability: Capability, value: Any) -> CapabilityCommand:  # noqa: ANN401
    """Translate a capability change into a sensor write.

    Args:
        capability: Capability to change.
        value: New capability value.

    Returns:
        The sensor write to perform.

    Raises:
        ValueError: If the value is not valid for the capability.

    """
    match capability:
        case Capability.ONOFF:
            wire_value = POWER_ON_VALUE if value else POWER_OFF_VALUE
            return CapabilityCommand(
                capability, SENSOR_POWER_COMMAND, wire_value, "power_on", bool(value)
            )
        case Capability.TARGET_TEMPERATURE:
            temperature = float(value)
            return CapabilityCommand(
                capability,
                SENSOR_SET_TEMP_AMB1,
                temperature,
                "target_temperature",
                temperature,
            )
        case Capability.THERMOSTAT_MODE:
            if value not in THERMOSTAT_MODE_MAP:
                invalid_mode = f"Invalid thermostat mode: {value}"
                raise ValueError(invalid_mode)
            return CapabilityCommand(
                capability,
                SENSOR_MODE,
                THERMOSTAT_MODE_MAP[value],
                "thermostat_mode",
                value,
            )
        case Capability.FAN_SPEED_1 | Capability.FAN_SPEED_2 | Capability.FAN_SPEED_3:
            speed = int(value)
            return CapabilityCommand(
                capability, FAN_SENSORS[capability], speed, str(capability), speed
            )
        case Capability.ECO_MODE:
            sensor_name = SENSOR_ECO_START if value else SENSOR_ECO_STOP
            return CapabilityCommand(
                capability, sensor_name, 1 if value else 0, "eco_mode", bool(value)
            )
        case Capability.POWER_LEVEL:
            level = int(value)
            return CapabilityCommand(
                capability, SENSOR_POWER_LEVEL, level, "power_level", level
            )

    unknown = f"Unknown capability: {capability}"
    raise ValueError(unknown)


def project_snapshots(
    status: StoveStatus,
    state: StoveState,
    previous: StoveData | None = None,
) -> StoveData:
    """Project status and state readings onto capability values.

    Readings missing from the snapshots keep their ``previous`` value;
    power, alarm and eco flags always take a value since the stove
    reports them as 0 when idle.
    """
    previous = previous or StoveData()

    phase_value = status.get(SENSOR_POWER, 0)
    mode_value = state.get(SENSOR_MODE)
    current_temperature = status.get(SENSOR_TEMP_AMBIENT_INSTALL) or status.get(
        SENSOR_TEMP_AMBIENT
    )

    return StoveData(
        power_on=phase_value > 0,
        current_temperature=_keep(current_temperature, previous.current_temperature),
        target_temperature=state.get(SENSOR_SET_TEMP_AMB1, previous.target_temperature),
        thermostat_mode=(
            THERMOSTAT_MODE_REVERSE_MAP.get(mode_value, "manual")
            if mode_value is not None
            else previous.thermostat_mode
        ),
        power_level=status.get(SENSOR_POWER_LEVEL, previous.power_level),
        alarm=status.get(SENSOR_ALARM, 0) == 1,
        fan_speed_1=state.get(SENSOR_FAN1, previous.fan_speed_1),
        fan_speed_2=state.get(SENSOR_FAN2, previous.fan_speed_2),
        fan_speed_3=state.get(SENSOR_FAN3, previous.fan_speed_3),
        eco_mode=state.get(SENSOR_ECO_START, 0) == 1,
        exhaust_temperature=status.get(SENSOR_TEMP_EXHAUST, previous.exhaust_temperature),
        water_temperature=status.get(SENSOR_TEMP_WATER, previous.water_temperature),
        stove_phase=STOVE_PHASES.get(phase_value, previous.stove_phase),
    )


def _keep(value: Any, previous: Any) -> Any:  # noqa: ANN401
    return previous if value is None else value
