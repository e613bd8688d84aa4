"""Pytest configuration and fixtures for MCZ Maestro tests."""

from typing import Any

import pytest

from custom_components.mcz_maestro.models import Appliance, StoveModel

APPLIANCE_ID = "appliance-1"
MODEL_ID = "model-1"
SENSOR_SET_TYPE_ID = "sst-1"
SERIAL_NUMBER = "SN123456"


@pytest.fixture
def sample_login_response() -> dict[str, Any]:
    """Fixture providing a successful login response."""
    return {"Token": "test_token"}


@pytest.fixture
def sample_appliance_entry() -> dict[str, Any]:
    """Fixture providing one appliance as listed by the cloud.

    Returns:
        A list entry wrapping the appliance in a ``Node`` object.

    """
    return {
        "Node": {
            "Id": APPLIANCE_ID,
            "Name": "Living room",
            "UniqueCode": SERIAL_NUMBER,
            "ModelId": MODEL_ID,
            "SensorSetTypeId": SENSOR_SET_TYPE_ID,
        }
    }


@pytest.fixture
def sample_model_response() -> dict[str, Any]:
    """Fixture providing a model description with two configuration groups.

    Returns:
        A PascalCase model payload as returned by the Model endpoint.

    """
    return {
        "ModelName": "Suite Comfort Air",
        "ModelId": MODEL_ID,
        "SensorSetTypeId": SENSOR_SET_TYPE_ID,
        "ModelConfigurations": [
            {
                "ConfigurationName": "Main",
                "ConfigurationId": 1,
                "Configurations": [
                    {"SensorName": "com_on_off", "SensorId": 100},
                    {
                        "SensorName": "set_amb1",
                        "SensorId": 101,
                        "Type": "double",
                        "Min": 5,
                        "Max": 35,
                    },
                    {"SensorName": "mode", "SensorId": 102},
                    {"SensorName": "fan1", "SensorId": 103},
                    {"SensorName": "pot", "SensorId": 104},
                ],
            },
            {
                "ConfigurationName": "Eco",
                "ConfigurationId": 2,
                "Configurations": [
                    {"SensorName": "eco_start", "SensorId": 200},
                    {"SensorName": "eco_stop", "SensorId": 201},
                    {"SensorName": "set_amb1", "SensorId": 999},
                ],
            },
        ],
    }


@pytest.fixture
def sample_status_payload() -> dict[str, Any]:
    """Fixture providing a status payload with nested sensors."""
    return {
        "sensors": {
            "stato_stufa": 4,
            "temp_ambiente": 20.5,
            "temp_fumi": 120,
            "allarme": 0,
            "pot": 3,
        },
        "SSID_wifi": "MCZ-AABBCCDDEEFF",
    }


@pytest.fixture
def sample_state_payload() -> dict[str, Any]:
    """Fixture providing a state payload with nested sensors."""
    return {
        "Sensors": {
            "set_amb1": 21.0,
            "mode": 1,
            "fan1": 3,
            "eco_start": 0,
        }
    }


@pytest.fixture
def appliance() -> Appliance:
    """Fixture providing the appliance under test."""
    return Appliance(
        id=APPLIANCE_ID,
        name="Living room",
        serial_number=SERIAL_NUMBER,
        model_id=MODEL_ID,
        sensor_set_type_id=SENSOR_SET_TYPE_ID,
    )


@pytest.fixture
def stove_model(sample_model_response: dict[str, Any]) -> StoveModel:
    """Fixture providing the parsed model description."""
    return StoveModel.from_api(sample_model_response)
