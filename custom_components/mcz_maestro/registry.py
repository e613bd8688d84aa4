"""Sensor identifier lookup for MCZ Maestro stoves."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import assert_never

from .const import LEGACY_SENSOR_IDS, LOCAL_SENSOR_IDS
from .exceptions import SensorNotFoundError
from .models import SensorIds, StoveModel
from .transport import ActiveTransport, CloudTransport, LegacyTransport, LocalTransport

_LOGGER = logging.getLogger(__name__)


class SensorRegistry:
    """Translate sensor names into the identifiers a transport expects.

    Cloud stoves publish a model description; local and first generation
    stoves use fixed register numbers, which belong to configuration 0.
    """

    def __init__(
        self,
        model: StoveModel | None = None,
        static_ids: Mapping[str, int] | None = None,
    ) -> None:
        self._model = model
        self._static_ids = dict(static_ids or {})

    @classmethod
    def for_transport(cls, transport: ActiveTransport) -> SensorRegistry:
        """Build the registry matching an active transport."""
        match transport:
            case CloudTransport(model=model):
                return cls(model=model)
            case LocalTransport():
                return cls(static_ids=LOCAL_SENSOR_IDS)
            case LegacyTransport():
                return cls(static_ids=LEGACY_SENSOR_IDS)
            case _:
                assert_never(transport)

    def find(self, sensor_name: str) -> SensorIds | None:
        """Return the ids of a sensor, or None if it is unknown."""
        if self._model is not None:
            return self._model.find_sensor_ids(sensor_name)
        sensor_id = self._static_ids.get(sensor_name)
        if sensor_id is None:
            return None
        return SensorIds(sensor_id=sensor_id, config_id=0)

    def supports(self, sensor_name: str) -> bool:
        """Return True if the sensor can be addressed."""
        return self.find(sensor_name) is not None

    def resolve(self, sensor_name: str, *, essential: bool) -> SensorIds | None:
        """Resolve a sensor, failing loudly only for essential ones.

        Args:
            sensor_name: Name of the sensor.
            essential: Whether the stove cannot be driven without it.

        Returns:
            The sensor ids, or None for an unknown optional sensor.

        Raises:
            SensorNotFoundError: If an essential sensor is unknown.

        """
        ids = self.find(sensor_name)
        if ids is not None:
            return ids
        if essential:
            missing = f"Essential sensor {sensor_name} not found in model"
            raise SensorNotFoundError(missing)
        _LOGGER.debug("Optional sensor %s not supported, skipping", sensor_name)
        return None
