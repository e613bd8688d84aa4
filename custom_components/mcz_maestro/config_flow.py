"""
Configuration flow for the MCZ Maestro integration.

The user enters either Maestro cloud credentials or the IPv4 address of
the stove. Cloud accounts holding several stoves get a second step to pick
the stove to add.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_PASSWORD, CONF_SCAN_INTERVAL, CONF_USERNAME
from homeassistant.core import callback
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.httpx_client import get_async_client

from .api import MaestroCloudClient
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
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_NO_APPLIANCES,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
)
from .detector import is_ipv4
from .exceptions import (
    AuthenticationError,
    ConnectionTimeoutError,
    MaestroConnectionError,
    MaestroError,
    MessageTimeoutError,
)
from .local import LocalMaestroClient
from .models import Appliance

_LOGGER = logging.getLogger(__name__)

MIN_SCAN_INTERVAL = 10
MAX_SCAN_INTERVAL = 3600

STEP_USER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_USERNAME): str,
        vol.Optional(CONF_PASSWORD, default=""): str,
        vol.Optional(CONF_MAC_ADDRESS): str,
    }
)

STEP_REAUTH_SCHEMA = vol.Schema({vol.Required(CONF_PASSWORD): str})


def appliance_entry_data(appliance: Appliance) -> dict[str, str]:
    """Return the config entry fields describing an appliance."""
    return {
        CONF_APPLIANCE_ID: appliance.id,
        CONF_APPLIANCE_NAME: appliance.name,
        CONF_SERIAL_NUMBER: appliance.serial_number,
        CONF_MODEL_ID: appliance.model_id,
        CONF_SENSOR_SET_TYPE_ID: appliance.sensor_set_type_id,
    }


class MaestroConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for the MCZ Maestro integration."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the config flow."""
        super().__init__()
        self._user_input: dict[str, Any] = {}
        self._appliances: dict[str, Appliance] = {}

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> MaestroOptionsFlow:  # noqa: ARG004
        """Return the options flow handler."""
        return MaestroOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: Username (or stove address), password and optional
                MAC address.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            username = user_input[CONF_USERNAME].strip()
            try:
                if is_ipv4(username):
                    appliances = await self._async_discover_local(username)
                else:
                    appliances = await self._async_discover_cloud(
                        username, user_input.get(CONF_PASSWORD, "")
                    )
            except AuthenticationError as err:
                _LOGGER.warning(
                    "Authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                )
                errors["base"] = ERROR_INVALID_AUTH
            except (ConnectionTimeoutError, MessageTimeoutError):
                _LOGGER.exception("Timeout error (%s)", ERROR_TIMEOUT)
                errors["base"] = ERROR_TIMEOUT
            except MaestroConnectionError:
                _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                errors["base"] = ERROR_CANNOT_CONNECT
            except MaestroError:
                _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                errors["base"] = ERROR_API_ERROR
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during authentication (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                if not appliances:
                    errors["base"] = ERROR_NO_APPLIANCES
                else:
                    self._user_input = {**user_input, CONF_USERNAME: username}
                    self._appliances = {
                        appliance.id: appliance for appliance in appliances
                    }
                    if len(appliances) == 1:
                        return await self._async_create_appliance_entry(appliances[0])
                    return await self.async_step_appliance()

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_SCHEMA,
            errors=errors,
        )

    async def async_step_appliance(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Let the user pick one stove of the account."""
        if user_input is not None:
            appliance = self._appliances[user_input[CONF_APPLIANCE_ID]]
            return await self._async_create_appliance_entry(appliance)

        return self.async_show_form(
            step_id="appliance",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_APPLIANCE_ID): vol.In(
                        {
                            appliance_id: appliance.name
                            for appliance_id, appliance in self._appliances.items()
                        }
                    ),
                }
            ),
        )

    async def async_step_reauth(
        self, entry_data: Mapping[str, Any]
    ) -> ConfigFlowResult:
        """Start re-authentication when the cloud rejects the stored password."""
        self._user_input = {CONF_USERNAME: entry_data[CONF_USERNAME]}
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for the new password and check it against the cloud."""
        errors: dict[str, str] = {}
        username = self._user_input[CONF_USERNAME]

        if user_input is not None:
            password = user_input[CONF_PASSWORD]
            client = MaestroCloudClient(get_async_client(self.hass), username, password)
            try:
                await client.async_login()
            except AuthenticationError as err:
                _LOGGER.warning(
                    "Re-authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                )
                errors["base"] = ERROR_INVALID_AUTH
            except ConnectionTimeoutError:
                _LOGGER.exception("Timeout error (%s)", ERROR_TIMEOUT)
                errors["base"] = ERROR_TIMEOUT
            except MaestroConnectionError:
                _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                errors["base"] = ERROR_CANNOT_CONNECT
            except MaestroError:
                _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                errors["base"] = ERROR_API_ERROR
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during re-authentication (%s)", ERROR_UNKNOWN
                )
                errors["base"] = ERROR_UNKNOWN
            else:
                return self.async_update_reload_and_abort(
                    self._get_reauth_entry(),
                    data_updates={CONF_PASSWORD: password},
                )
            finally:
                await client.async_disconnect()

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=STEP_REAUTH_SCHEMA,
            description_placeholders={CONF_USERNAME: username},
            errors=errors,
        )

    async def _async_create_appliance_entry(
        self, appliance: Appliance
    ) -> ConfigFlowResult:
        await self.async_set_unique_id(appliance.id.lower())
        self._abort_if_unique_id_configured()

        data = {
            CONF_USERNAME: self._user_input[CONF_USERNAME],
            CONF_PASSWORD: self._user_input.get(CONF_PASSWORD, ""),
            **appliance_entry_data(appliance),
        }
        if mac_address := self._user_input.get(CONF_MAC_ADDRESS):
            data[CONF_MAC_ADDRESS] = mac_address.strip()

        return self.async_create_entry(title=f"MCZ {appliance.name}", data=data)

    async def _async_discover_cloud(
        self, username: str, password: str
    ) -> list[Appliance]:
        client = MaestroCloudClient(get_async_client(self.hass), username, password)
        await client.async_login()
        _LOGGER.info("Successfully authenticated with MCZ Maestro cloud")
        try:
            return await client.async_get_appliances()
        finally:
            await client.async_disconnect()

    async def _async_discover_local(self, host: str) -> list[Appliance]:
        client = LocalMaestroClient(async_get_clientsession(self.hass), host)
        try:
            await client.async_connect()
            await client.async_get_status(
                Appliance(host, host, host, "local", "local")
            )
            _LOGGER.info("Successfully reached MCZ stove at %s", host)
            return await client.async_get_appliances()
        finally:
            await client.async_disconnect()


class MaestroOptionsFlow(OptionsFlow):
    """Handle the options of an MCZ Maestro entry."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage polling interval, telemetry source and fallback MAC."""
        if user_input is not None:
            return self.async_create_entry(data=user_input)

        options = self.config_entry.options
        mac_address = options.get(CONF_MAC_ADDRESS) or self.config_entry.data.get(
            CONF_MAC_ADDRESS, ""
        )
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_SCAN_INTERVAL,
                        default=options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL),
                    ): vol.All(
                        vol.Coerce(int),
                        vol.Range(min=MIN_SCAN_INTERVAL, max=MAX_SCAN_INTERVAL),
                    ),
                    vol.Optional(
                        CONF_CLOUD_TELEMETRY,
                        default=options.get(CONF_CLOUD_TELEMETRY, False),
                    ): bool,
                    vol.Optional(CONF_MAC_ADDRESS, default=mac_address): str,
                }
            ),
        )
