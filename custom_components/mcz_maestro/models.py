"""Data models for the MCZ Maestro integration.

The Maestro cloud returns the same entities with different spellings
depending on the endpoint and the firmware generation (snake_case vs
PascalCase, sometimes wrapped in a ``Node`` object). All spellings are
listed once in ``FIELD_ALIASES`` and resolved when a payload is parsed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Self

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    # Sensor descriptors
    "sensor_name": ("sensor_name", "SensorName"),
    "sensor_id": ("sensor_id", "SensorId"),
    "value_type": ("type", "Type"),
    "min": ("min", "Min"),
    "max": ("max", "Max"),
    "visible": ("visible", "Visible"),
    # Configuration groups
    "configuration_name": ("configuration_name", "ConfigurationName"),
    "configuration_id": ("configuration_id", "ConfigurationId"),
    "configurations": ("configurations", "Configurations"),
    # Models
    "model_name": ("model_name", "ModelName"),
    "model_id": ("model_id", "ModelId"),
    "sensor_set_type_id": ("sensor_set_type_id", "SensorSetTypeId"),
    "model_configurations": ("model_configurations", "ModelConfigurations"),
    # Appliances
    "node": ("Node",),
    "id": ("Id", "id"),
    "name": ("Name", "name"),
    "appliance_model_id": ("ModelId", "model_id"),
    "serial_number": ("UniqueCode", "unique_code", "Description", "serial_number"),
    "appliance_sensor_set_type_id": ("SensorSetTypeId", "sensor_set_type_id"),
    # Snapshots
    "sensors": ("sensors", "Sensors"),
}


def read_field(data: Mapping[str, Any], name: str, default: Any = None) -> Any:  # noqa: ANN401
    """Return the first non-null spelling of a logical field.

    Args:
        data: Raw payload dictionary.
        name: Logical field name, a key of ``FIELD_ALIASES``.
        default: Value returned when no spelling is present.

    Returns:
        The field value or ``default``.

    """
    for key in FIELD_ALIASES[name]:
        value = data.get(key)
        if value is not None:
            return value
    return default


@dataclass(frozen=True, slots=True)
class Credentials:
    """Login identity for one appliance session."""

    username: str
    password: str = field(default="", repr=False)


@dataclass(frozen=True, slots=True)
class Appliance:
    """Represents a stove as listed by the Maestro cloud.

    Attributes:
        id: Cloud identifier, used to address the REST endpoints.
        name: Human-readable name.
        serial_number: Serial number, used to join the Socket.IO session.
        model_id: Identifier of the sensor model description.
        sensor_set_type_id: Sensor set the model belongs to.

    """

    id: str
    name: str
    serial_number: str
    model_id: str
    sensor_set_type_id: str

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Self:
        """Build an appliance from a list entry, unwrapping ``Node``."""
        node = read_field(data, "node", data)
        return cls(
            id=str(read_field(node, "id", "")),
            name=str(read_field(node, "name", "")),
            serial_number=str(read_field(node, "serial_number", "")),
            model_id=str(read_field(node, "appliance_model_id", "")),
            sensor_set_type_id=str(read_field(node, "appliance_sensor_set_type_id", "")),
        )


@dataclass(frozen=True, slots=True)
class SensorIds:
    """Transport addressing of a sensor."""

    sensor_id: int | str
    config_id: int | str


@dataclass(frozen=True, slots=True)
class SensorDescriptor:
    """A named read or write point of a stove model."""

    sensor_name: str
    sensor_id: int | str
    value_type: str = ""
    min: float | None = None
    max: float | None = None
    visible: bool = True

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            sensor_name=read_field(data, "sensor_name", ""),
            sensor_id=read_field(data, "sensor_id", 0),
            value_type=read_field(data, "value_type", ""),
            min=read_field(data, "min"),
            max=read_field(data, "max"),
            visible=bool(read_field(data, "visible", True)),
        )


@dataclass(frozen=True, slots=True)
class ModelConfiguration:
    """A configuration group of a stove model."""

    name: str
    configuration_id: int | str
    sensors: tuple[SensorDescriptor, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            name=read_field(data, "configuration_name", ""),
            configuration_id=read_field(data, "configuration_id", 0),
            sensors=tuple(
                SensorDescriptor.from_api(sensor)
                for sensor in read_field(data, "configurations", [])
            ),
        )

    def find_sensor(self, sensor_name: str) -> SensorDescriptor | None:
        """Return the sensor named ``sensor_name`` in this group."""
        return next(
            (sensor for sensor in self.sensors if sensor.sensor_name == sensor_name),
            None,
        )


@dataclass(frozen=True, slots=True)
class StoveModel:
    """Sensor model description of a stove."""

    model_name: str
    model_id: str
    sensor_set_type_id: str
    configurations: tuple[ModelConfiguration, ...] = ()

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            model_name=str(read_field(data, "model_name", "")),
            model_id=str(read_field(data, "model_id", "")),
            sensor_set_type_id=str(read_field(data, "sensor_set_type_id", "")),
            configurations=tuple(
                ModelConfiguration.from_api(configuration)
                for configuration in read_field(data, "model_configurations", [])
            ),
        )

    def find_sensor_ids(self, sensor_name: str) -> SensorIds | None:
        """Return the ids of the first configuration group holding the sensor.

        Args:
            sensor_name: Name of the sensor to look for.

        Returns:
            SensorIds of the match, or None if no group contains the sensor.

        """
        for configuration in self.configurations:
            sensor = configuration.find_sensor(sensor_name)
            if sensor is not None:
                return SensorIds(
                    sensor_id=sensor.sensor_id,
                    config_id=configuration.configuration_id,
                )
        return None


@dataclass(frozen=True, slots=True)
class SensorSnapshot:
    """Immutable sensor readings captured at one point in time."""

    sensors: Mapping[str, Any] = field(default_factory=dict)
    raw: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "sensors", MappingProxyType(dict(self.sensors)))

    @classmethod
    def from_payload(cls, data: Any) -> Self:  # noqa: ANN401
        """Normalize a sensor-bearing payload.

        Sensors may be nested under ``sensors`` and/or ``Sensors``; when
        neither key holds a mapping the payload itself is the sensor map.
        """
        if not isinstance(data, Mapping):
            return cls(sensors={}, raw=data)

        sensors: dict[str, Any] = {}
        nested = False
        for key in FIELD_ALIASES["sensors"]:
            value = data.get(key)
            if isinstance(value, Mapping):
                sensors.update(value)
                nested = True

        if not nested:
            sensors.update(data)

        return cls(sensors=sensors, raw=data)

    @classmethod
    def empty(cls) -> Self:
        """Return a snapshot without any reading."""
        return cls(sensors={}, raw={})

    def get(self, sensor_name: str, default: Any = None) -> Any:  # noqa: ANN401
        """Return the value of a sensor, or ``default`` when absent."""
        value = self.sensors.get(sensor_name)
        return default if value is None else value

    def __bool__(self) -> bool:
        return bool(self.sensors)


@dataclass(frozen=True, slots=True)
class StoveStatus(SensorSnapshot):
    """Read-only telemetry: power state, temperatures, alarms."""


@dataclass(frozen=True, slots=True)
class StoveState(SensorSnapshot):
    """Current configuration: setpoints, mode, fan speeds, eco flag."""
