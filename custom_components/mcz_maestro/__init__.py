"""The MCZ Maestro integration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_PASSWORD, CONF_SCAN_INTERVAL, CONF_USERNAME, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import (
    ConfigEntryAuthFailed,
    ConfigEntryError,
    ConfigEntryNotReady,
    HomeAssistantError,
)
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .api import create_session_client
from .const import (
    CONF_APPLIANCE_ID,
    CONF_APPLIANCE_NAME,
    CONF_CLOUD_TELEMETRY,
    CONF_MAC_ADDRESS,
    CONF_MODEL_ID,
    CONF_SENSOR_SET_TYPE_ID,
    CONF_SERIAL_NUMBER,
    DEFAULT_SCAN_INTERVAL,
    DOMAIN,
)
from .coordinator import MaestroCoordinator
from .detector import async_detect_transport
from .exceptions import AuthenticationError, MaestroError, UndeterminedMacError
from .models import Appliance, Credentials

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [
    Platform.BINARY_SENSOR,
    Platform.CLIMATE,
    Platform.NUMBER,
    Platform.SENSOR,
    Platform.SWITCH,
]


def appliance_from_entry(data: Mapping[str, Any]) -> Appliance:
    """Rebuild the appliance identity stored in a config entry."""
    return Appliance(
        id=data[CONF_APPLIANCE_ID],
        name=data.get(CONF_APPLIANCE_NAME, data[CONF_APPLIANCE_ID]),
        serial_number=data.get(CONF_SERIAL_NUMBER, ""),
        model_id=data.get(CONF_MODEL_ID, ""),
        sensor_set_type_id=data.get(CONF_SENSOR_SET_TYPE_ID, ""),
    )


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Detect the stove transport and start polling."""
    _LOGGER.info("Setting up MCZ Maestro integration for entry %s", entry.entry_id)

    credentials = Credentials(
        username=entry.data[CONF_USERNAME],
        password=entry.data.get(CONF_PASSWORD, ""),
    )
    appliance = appliance_from_entry(entry.data)
    fallback_mac = entry.options.get(CONF_MAC_ADDRESS) or entry.data.get(CONF_MAC_ADDRESS)
    http_session = create_session_client(hass)

    try:
        transport = await async_detect_transport(
            credentials,
            appliance,
            http_session=http_session,
            ws_session=async_get_clientsession(hass),
            fallback_mac=fallback_mac,
            cloud_telemetry=entry.options.get(CONF_CLOUD_TELEMETRY, False),
        )
    except MaestroError as err:
        await http_session.aclose()
        raise _setup_error(err, appliance) from err

    _LOGGER.info("Using %s transport for %s", transport.kind, appliance.name)

    coordinator = MaestroCoordinator(
        hass,
        entry,
        transport,
        appliance,
        scan_interval=entry.options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
        http_session=http_session,
    )
    try:
        await coordinator.async_config_entry_first_refresh()
    except (ConfigEntryAuthFailed, ConfigEntryError, ConfigEntryNotReady):
        await coordinator.async_shutdown_transport()
        raise

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))
    return True


def _setup_error(err: MaestroError, appliance: Appliance) -> HomeAssistantError:
    """Map a detection failure to the matching entry setup error."""
    if isinstance(err, AuthenticationError):
        return ConfigEntryAuthFailed(f"Authentication failed: {err}")
    if isinstance(err, UndeterminedMacError):
        return ConfigEntryError(f"{err}; set the MAC address in the integration options")
    return ConfigEntryNotReady(f"Cannot reach {appliance.name}: {err}")


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload platforms and close the stove transport."""
    _LOGGER.info("Unloading MCZ Maestro integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    coordinator: MaestroCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
    await coordinator.async_shutdown_transport()
    _LOGGER.debug("Closed transport for entry %s", entry.entry_id)
    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so new options take effect."""
    await hass.config_entries.async_reload(entry.entry_id)
