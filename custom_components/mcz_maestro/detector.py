"""Detection of the transport an MCZ Maestro stove requires.

The order is fixed: an IPv4 address as username selects the stove's own
WebSocket server; otherwise the cloud is used, and a stove whose model
description cannot be fetched is treated as a first generation stove
reachable only through the Socket.IO gateway.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from .api import MaestroCloudClient
from .const import SSID_FIELD, SSID_MAC_PREFIX
from .exceptions import MaestroError, ModelUnavailableError, UndeterminedMacError
from .legacy import SocketIOMaestroClient
from .local import LocalMaestroClient
from .transport import ActiveTransport, CloudTransport, LegacyTransport, LocalTransport

if TYPE_CHECKING:
    import aiohttp
    import httpx

    from .models import Appliance, Credentials, StoveStatus

_LOGGER = logging.getLogger(__name__)

IPV4_PATTERN = re.compile(r"^\d+\.\d+\.\d+\.\d+$")

type CloudClientFactory = Callable[[httpx.AsyncClient, str, str], MaestroCloudClient]


def is_ipv4(value: str) -> bool:
    """Return True if the value looks like a dotted IPv4 address."""
    return IPV4_PATTERN.match(value) is not None


def extract_mac_address(status: StoveStatus) -> str | None:
    """Extract the stove MAC address from its Wi-Fi SSID.

    The stove access point is named ``MCZ-<MAC>``, so the MAC is the SSID
    without its prefix. Returns None when the SSID is absent or does not
    carry the prefix.
    """
    ssid = status.get(SSID_FIELD)
    if ssid is None and isinstance(status.raw, Mapping):
        ssid = status.raw.get(SSID_FIELD)

    if not isinstance(ssid, str):
        _LOGGER.debug("%s not found in status", SSID_FIELD)
        return None
    if not ssid.startswith(SSID_MAC_PREFIX):
        _LOGGER.warning("%s does not start with %s: %s", SSID_FIELD, SSID_MAC_PREFIX, ssid)
        return None

    mac_address = ssid.removeprefix(SSID_MAC_PREFIX)
    return mac_address or None


async def async_detect_transport(
    credentials: Credentials,
    appliance: Appliance,
    *,
    http_session: httpx.AsyncClient,
    ws_session: aiohttp.ClientSession,
    cloud_client_factory: CloudClientFactory = MaestroCloudClient,
    fallback_mac: str | None = None,
    cloud_telemetry: bool = False,
) -> ActiveTransport:
    """Pick and open the transport for an appliance.

    Args:
        credentials: Account credentials, or the stove address as username.
        appliance: Appliance to drive.
        http_session: HTTP client for the cloud API.
        ws_session: aiohttp session for the local WebSocket.
        cloud_client_factory: Builds the cloud client from session,
            username and password.
        fallback_mac: MAC address to use when the stove does not report one.
        cloud_telemetry: Keep the cloud client to read first generation
            stoves instead of the Socket.IO gateway.

    Returns:
        The active transport, already connected or logged in.

    Raises:
        AuthenticationError: If the cloud login fails.
        MaestroConnectionError: If the stove or the cloud cannot be reached.
        UndeterminedMacError: If a first generation stove has no known MAC.

    """
    if is_ipv4(credentials.username):
        _LOGGER.info("Using local WebSocket transport for %s", credentials.username)
        local_client = LocalMaestroClient(ws_session, credentials.username)
        await local_client.async_connect()
        return LocalTransport(local_client)

    cloud_client = cloud_client_factory(
        http_session, credentials.username, credentials.password
    )
    await cloud_client.async_login()

    try:
        model = await cloud_client.async_get_model(appliance.model_id)
    except ModelUnavailableError as err:
        _LOGGER.info(
            "Model of %s unavailable (%s), using Socket.IO transport",
            appliance.name,
            err,
        )
    else:
        _LOGGER.info("Using cloud transport for %s (%s)", appliance.name, model.model_name)
        return CloudTransport(cloud_client, model)

    mac_address = await _async_find_mac_address(cloud_client, appliance, fallback_mac)
    legacy_client = SocketIOMaestroClient(appliance.serial_number, mac_address)
    await legacy_client.async_connect()

    telemetry = cloud_client if cloud_telemetry else None
    if telemetry is None:
        await cloud_client.async_disconnect()
    return LegacyTransport(legacy_client, telemetry)


async def _async_find_mac_address(
    cloud_client: MaestroCloudClient,
    appliance: Appliance,
    fallback_mac: str | None,
) -> str:
    try:
        status = await cloud_client.async_get_status(appliance)
    except MaestroError as err:
        _LOGGER.warning("Cannot read status of %s to find its MAC: %s", appliance.name, err)
        mac_address = None
    else:
        mac_address = extract_mac_address(status)

    if mac_address:
        _LOGGER.debug("Extracted MAC %s from %s", mac_address, SSID_FIELD)
        return mac_address

    if fallback_mac:
        _LOGGER.info("Using configured MAC address for %s", appliance.name)
        return fallback_mac

    undetermined = f"Could not determine MAC address of {appliance.name}"
    raise UndeterminedMacError(undetermined)
