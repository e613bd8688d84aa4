"""Cloud REST client for MCZ Maestro stoves.

This module provides the helpers and the client used to talk to the
Maestro cloud, including authentication, appliance discovery, model
retrieval, status polling and command sending.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import (
    BASE_URL_HLAPI,
    BASE_URL_MCZ,
    ENDPOINT_ACTIVATE_PROGRAM,
    ENDPOINT_APPLIANCE,
    ENDPOINT_APPLIANCE_LIST,
    ENDPOINT_LOGIN,
    ENDPOINT_MODEL,
    ENDPOINT_PING,
    HEADER_TENANT,
    HEADER_TOKEN,
    HTTP_TIMEOUT,
    TENANT_ID,
)
from .exceptions import (
    AuthenticationError,
    CommandFailedError,
    MaestroApiError,
    MaestroConnectionError,
    MaestroError,
    ModelUnavailableError,
)
from .models import Appliance, SensorIds, StoveModel, StoveState, StoveStatus

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401


def create_headers(token: str | None = None) -> dict[str, str]:
    """Create HTTP headers for Maestro API requests.

    Args:
        token: Optional session token to include in headers.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "content-type": "application/json",
        "accept": "application/json",
    }
    if token:
        headers[HEADER_TOKEN] = token
    return headers


def create_login_headers() -> dict[str, str]:
    """Create HTTP headers for the tenant-scoped login request."""
    headers = create_headers()
    headers[HEADER_TENANT] = TENANT_ID
    return headers


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error."""
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    """Check if HTTP status code indicates an authentication error."""
    return status == HTTP_UNAUTHORIZED


def validate_response(response: httpx.Response) -> Any:  # noqa: ANN401
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response, or an empty dict for an empty body.

    Raises:
        AuthenticationError: If the server answered 401.
        MaestroApiError: If another HTTP error or an invalid body is detected.

    """
    _validate_http_status(response)
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as err:
        invalid_body = f"Invalid JSON in response: {err}"
        raise MaestroApiError(invalid_body) from err


def _validate_http_status(response: httpx.Response) -> None:
    if not is_http_error(response.status_code):
        return

    if is_auth_error(response.status_code):
        auth_error = "Authentication error"
        raise AuthenticationError(auth_error)

    client_error = f"Request failed: {response.status_code}"
    raise MaestroApiError(client_error)


def extract_token(data: Any) -> str:  # noqa: ANN401
    """Extract the session token from a login response.

    Raises:
        AuthenticationError: If the response carries no token.

    """
    token = data.get("Token") if isinstance(data, dict) else None
    if not token:
        missing_token = "No token in login response"
        raise AuthenticationError(missing_token)
    return token


def extract_appliances(data: Any) -> list[Appliance]:  # noqa: ANN401
    """Extract the appliance list from the paginated list response.

    The endpoint has been seen answering with a bare array, with
    ``{"objects": [...]}`` and with ``{"Objects": [...]}``. Any other
    shape yields an empty list.

    Args:
        data: Parsed response body.

    Returns:
        List of Appliance objects.

    """
    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict) and isinstance(data.get("objects"), list):
        entries = data["objects"]
    elif isinstance(data, dict) and isinstance(data.get("Objects"), list):
        entries = data["Objects"]
    else:
        _LOGGER.warning("Unexpected appliance list format: %s", data)
        return []

    return [Appliance.from_api(entry) for entry in entries if isinstance(entry, dict)]


def build_command_payload(
    appliance: Appliance,
    sensor: SensorIds,
    value: Any,  # noqa: ANN401
) -> dict[str, Any]:
    """Build the ActivateProgram body for a single sensor write.

    The appliance firmware only accepts identifiers encoded as strings,
    whatever their logical type.
    """
    return {
        "ModelId": str(appliance.model_id),
        "ConfigurationId": str(sensor.config_id),
        "SensorSetTypeId": str(appliance.sensor_set_type_id),
        "Commands": [
            {
                "SensorId": str(sensor.sensor_id),
                "Value": value,
            }
        ],
    }


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for the Maestro API.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=HTTP_TIMEOUT)
    retry = Retry(total=3, backoff_factor=0.5)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


class MaestroCloudClient:
    """Client for the Maestro cloud REST API.

    The client owns the session token. A request rejected with 401 is
    replayed once after a fresh login; a second rejection is final.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        username: str,
        password: str,
    ) -> None:
        """Initialize the client.

        Args:
            session: HTTP client session.
            username: Maestro account email.
            password: Maestro account password.

        """
        self._session = session
        self._username = username
        self._password = password
        self._token: str | None = None

    @property
    def token(self) -> str | None:
        """Return the current session token."""
        return self._token

    async def async_login(self) -> None:
        """Exchange the credentials for a session token.

        Raises:
            AuthenticationError: If the credentials are rejected or no token
                is returned.
            MaestroConnectionError: If the cloud cannot be reached.

        """
        url = f"{BASE_URL_HLAPI}{ENDPOINT_LOGIN}"
        payload = {"username": self._username, "password": self._password}

        _LOGGER.debug("Logging in to MCZ Maestro cloud")
        try:
            response = await self._session.post(
                url, headers=create_login_headers(), json=payload
            )
            data = validate_response(response)
        except httpx.RequestError as err:
            connection_error = f"Login request failed: {err}"
            raise MaestroConnectionError(connection_error) from err
        except AuthenticationError:
            raise
        except MaestroError as err:
            auth_error = f"Authentication failed: {err}"
            raise AuthenticationError(auth_error) from err

        self._token = extract_token(data)
        _LOGGER.debug("Successfully logged in to MCZ Maestro cloud")

    async def async_disconnect(self) -> None:
        """Forget the session token; the HTTP session belongs to the caller."""
        self._token = None

    async def _async_request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        retried: bool = False,
    ) -> Any:  # noqa: ANN401
        if self._token is None:
            await self.async_login()

        try:
            response = await self._session.request(
                method, url, headers=create_headers(self._token), json=json
            )
        except httpx.RequestError as err:
            connection_error = f"Request to {url} failed: {err}"
            raise MaestroConnectionError(connection_error) from err

        if is_auth_error(response.status_code):
            if retried:
                auth_error = "Request rejected again after token refresh"
                raise AuthenticationError(auth_error)
            _LOGGER.info("Token rejected (401), logging in again")
            self._token = None
            try:
                await self.async_login()
            except AuthenticationError:
                raise
            except MaestroError as err:
                refresh_error = f"Token refresh failed: {err}"
                raise AuthenticationError(refresh_error) from err
            return await self._async_request(method, url, json=json, retried=True)

        return validate_response(response)

    async def async_get_appliances(self) -> list[Appliance]:
        """Fetch the stoves associated with the account."""
        _LOGGER.debug("Fetching appliance list")
        data = await self._async_request(
            "POST", f"{BASE_URL_HLAPI}{ENDPOINT_APPLIANCE_LIST}", json={}
        )
        appliances = extract_appliances(data)
        _LOGGER.debug("Found %d appliance(s)", len(appliances))
        return appliances

    async def async_get_model(self, model_id: str) -> StoveModel:
        """Fetch the sensor model of a stove.

        Args:
            model_id: Model identifier (not the appliance id).

        Raises:
            AuthenticationError: If the session cannot be authenticated.
            ModelUnavailableError: On any other failure.

        """
        _LOGGER.debug("Fetching stove model %s", model_id)
        try:
            data = await self._async_request(
                "POST", f"{BASE_URL_HLAPI}{ENDPOINT_MODEL}/{model_id}", json={}
            )
            if not isinstance(data, dict):
                unexpected = f"Unexpected model payload: {type(data).__name__}"
                raise ModelUnavailableError(unexpected)
            return StoveModel.from_api(data)
        except (AuthenticationError, ModelUnavailableError):
            raise
        except (MaestroError, TypeError, AttributeError) as err:
            unavailable = f"Model {model_id} unavailable: {err}"
            raise ModelUnavailableError(unavailable) from err

    async def async_get_status(self, appliance: Appliance) -> StoveStatus:
        """Fetch the current telemetry of a stove."""
        data = await self._async_request(
            "GET", f"{BASE_URL_MCZ}{ENDPOINT_APPLIANCE}/{appliance.id}/Status"
        )
        return StoveStatus.from_payload(data)

    async def async_get_state(self, appliance: Appliance) -> StoveState:
        """Fetch the current settings of a stove."""
        data = await self._async_request(
            "GET", f"{BASE_URL_MCZ}{ENDPOINT_APPLIANCE}/{appliance.id}/State"
        )
        return StoveState.from_payload(data)

    async def async_send_command(
        self,
        appliance: Appliance,
        sensor: SensorIds,
        value: Any,  # noqa: ANN401
    ) -> None:
        """Write one sensor value through the ActivateProgram endpoint.

        Raises:
            AuthenticationError: If the session cannot be authenticated.
            CommandFailedError: If the command cannot be delivered.

        """
        payload = build_command_payload(appliance, sensor, value)
        _LOGGER.debug("Activating program on %s: %s", appliance.id, payload)
        try:
            await self._async_request(
                "POST",
                f"{BASE_URL_MCZ}{ENDPOINT_ACTIVATE_PROGRAM}/{appliance.id}",
                json=payload,
            )
        except AuthenticationError:
            raise
        except MaestroConnectionError as err:
            command_error = f"Command to {appliance.id} failed: {err}"
            raise CommandFailedError(command_error, connection_lost=True) from err
        except MaestroError as err:
            command_error = f"Command to {appliance.id} failed: {err}"
            raise CommandFailedError(command_error) from err

    async def async_ping(self, appliance: Appliance) -> Any:  # noqa: ANN401
        """Send a keepalive to the stove."""
        return await self._async_request(
            "POST", f"{BASE_URL_MCZ}{ENDPOINT_PING}/{appliance.id}", json={}
        )
