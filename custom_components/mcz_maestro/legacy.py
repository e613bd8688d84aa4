"""Socket.IO client for first generation MCZ Maestro stoves.

First generation stoves are not served by the REST command endpoints.
They are reached through the MCZ Socket.IO gateway: the client joins a
session keyed by serial number and MAC address, then every reading the
gateway pushes arrives on one shared broadcast event.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from typing import Any

import socketio

from .const import (
    LEGACY_CALL_TYPE,
    LEGACY_CLIENT_TYPE,
    LEGACY_CONNECT_TIMEOUT,
    LEGACY_EVENT_BROADCAST,
    LEGACY_EVENT_JOIN,
    LEGACY_EVENT_JOINED,
    LEGACY_EVENT_REQUEST,
    LEGACY_READ_TIMEOUT,
    LEGACY_RECONNECT_ATTEMPTS,
    LEGACY_RECONNECT_DELAY,
    LEGACY_RECONNECT_DELAY_MAX,
    LEGACY_SOCKET_URL,
    LEGACY_STATE_REQUEST,
    LEGACY_STATUS_REQUEST,
    LEGACY_WRITE_PREFIX,
)
from .exceptions import (
    CommandFailedError,
    ConnectionTimeoutError,
    MaestroConnectionError,
    MaestroError,
    ModelUnavailableError,
)
from .models import Appliance, SensorIds, SensorSnapshot, StoveModel, StoveState, StoveStatus

_LOGGER = logging.getLogger(__name__)


def format_command_value(value: Any) -> str:  # noqa: ANN401
    """Render a command value the way the stove firmware parses it.

    Booleans become ``1``/``0`` and integral floats lose their decimals.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class SocketIOMaestroClient:
    """Client for the MCZ Socket.IO gateway.

    The gateway has no request correlation. Read requests queue a waiter
    and the next broadcast resolves the oldest waiter, so two reads in
    flight at the same time may receive each other's payload. Commands are
    fire-and-forget: a successful emission is all that is known.
    """

    def __init__(
        self,
        serial_number: str,
        mac_address: str,
        socket_url: str = LEGACY_SOCKET_URL,
    ) -> None:
        """Initialize the client.

        Args:
            serial_number: Serial number of the stove.
            mac_address: MAC address of the stove's Wi-Fi module.
            socket_url: URL of the Socket.IO gateway.

        """
        self.serial_number = serial_number
        self.mac_address = mac_address
        self._socket_url = socket_url
        self._sio: socketio.AsyncClient | None = None
        self._connected = False
        self._waiters: deque[asyncio.Future[Any]] = deque()

    @property
    def connected(self) -> bool:
        """Return True if the gateway connection is up."""
        return self._connected

    async def async_connect(self) -> None:
        """Connect to the gateway; joining the session happens on connect.

        Raises:
            ConnectionTimeoutError: If the gateway does not answer in time.
            MaestroConnectionError: If the connection is refused.

        """
        if self._sio is not None and self._connected:
            _LOGGER.debug("Already connected to MCZ Socket.IO gateway")
            return

        if self._sio is not None:
            # The dropped client may still be reconnecting with its own handlers
            await self._async_shutdown_client()

        self._sio = socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=LEGACY_RECONNECT_ATTEMPTS,
            reconnection_delay=LEGACY_RECONNECT_DELAY,
            reconnection_delay_max=LEGACY_RECONNECT_DELAY_MAX,
            logger=False,
            engineio_logger=False,
        )
        self._register_event_handlers()

        _LOGGER.info("Connecting to MCZ Socket.IO gateway at %s", self._socket_url)
        try:
            async with asyncio.timeout(LEGACY_CONNECT_TIMEOUT):
                await self._sio.connect(
                    self._socket_url,
                    transports=["websocket", "polling"],
                )
        except TimeoutError as err:
            timeout_error = f"Timed out connecting to {self._socket_url}"
            raise ConnectionTimeoutError(timeout_error) from err
        except socketio.exceptions.ConnectionError as err:
            connection_error = f"Cannot connect to {self._socket_url}: {err}"
            raise MaestroConnectionError(connection_error) from err

        self._connected = True
        _LOGGER.info("Connected to MCZ Socket.IO gateway")

    async def async_login(self) -> None:
        """Connect if needed; the gateway authenticates through the join."""
        if not self._connected:
            await self.async_connect()

    def _register_event_handlers(self) -> None:
        """Register Socket.IO event handlers."""
        if self._sio is None:
            return

        @self._sio.event
        async def connect() -> None:
            """Handle (re)connection by joining the stove session."""
            await self._async_handle_connect()

        @self._sio.event
        async def disconnect(*_args: Any) -> None:
            """Handle disconnection; the client reconnects by itself."""
            _LOGGER.warning("MCZ Socket.IO gateway disconnected")
            self._connected = False

        @self._sio.on(LEGACY_EVENT_JOINED)
        async def on_joined(data: Any) -> None:
            _LOGGER.debug("Join confirmed by gateway: %s", data)

        @self._sio.on(LEGACY_EVENT_BROADCAST)
        async def on_broadcast(data: Any) -> None:
            """Handle stove data pushed by the gateway."""
            await self._async_handle_broadcast(data)

    async def _async_handle_connect(self) -> None:
        """Join the session of the stove."""
        self._connected = True
        join_data = {
            "serialNumber": self.serial_number,
            "macAddress": self.mac_address,
            "type": LEGACY_CLIENT_TYPE,
        }
        _LOGGER.debug("Joining stove session: %s", join_data)
        await self._sio.emit(LEGACY_EVENT_JOIN, join_data)

    async def _async_handle_broadcast(self, data: Any) -> None:  # noqa: ANN401
        """Hand a broadcast to the oldest waiting read."""
        _LOGGER.debug("Received stove data: %.200s", data)
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(data)
                return
        _LOGGER.debug("No read waiting, dropping broadcast")

    async def _async_emit_request(self, request: str) -> None:
        """Emit a request string for the stove, reconnecting if needed."""
        if not self._connected:
            await self.async_connect()

        command_data = {
            "serialNumber": self.serial_number,
            "macAddress": self.mac_address,
            "tipoChiamata": LEGACY_CALL_TYPE,
            "richiesta": request,
        }
        _LOGGER.debug("Sending request: %s", request)
        try:
            await self._sio.emit(LEGACY_EVENT_REQUEST, command_data)
        except socketio.exceptions.SocketIOError as err:
            emit_error = f"Cannot emit {request}: {err}"
            raise MaestroConnectionError(emit_error) from err

    async def _async_read[SnapshotT: SensorSnapshot](
        self, request: str, snapshot_type: type[SnapshotT]
    ) -> SnapshotT:
        """Request a reading and capture the next broadcast.

        Returns an empty snapshot when nothing arrives in time so that the
        polling loop keeps running.
        """
        waiter: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await self._async_emit_request(request)
            async with asyncio.timeout(LEGACY_READ_TIMEOUT):
                data = await waiter
        except TimeoutError:
            _LOGGER.debug("No broadcast received for %s", request)
            return snapshot_type.empty()
        finally:
            with contextlib.suppress(ValueError):
                self._waiters.remove(waiter)

        return snapshot_type.from_payload(data)

    async def async_get_appliances(self) -> list[Appliance]:
        """Return the stove this client joined."""
        return [
            Appliance(
                id=f"socketio_{self.serial_number}",
                name=f"MCZ Stove ({self.serial_number})",
                serial_number=self.serial_number,
                model_id="socketio_m1",
                sensor_set_type_id="socketio_m1",
            )
        ]

    async def async_get_model(self, model_id: str) -> StoveModel:
        """Model descriptions are not published for first generation stoves."""
        unavailable = f"Model {model_id} not available over Socket.IO"
        raise ModelUnavailableError(unavailable)

    async def async_get_status(self, appliance: Appliance) -> StoveStatus:  # noqa: ARG002
        """Request the stove telemetry."""
        return await self._async_read(LEGACY_STATUS_REQUEST, StoveStatus)

    async def async_get_state(self, appliance: Appliance) -> StoveState:  # noqa: ARG002
        """Request the stove parameters."""
        return await self._async_read(LEGACY_STATE_REQUEST, StoveState)

    async def async_send_command(
        self,
        appliance: Appliance,  # noqa: ARG002
        sensor: SensorIds,
        value: Any,  # noqa: ANN401
    ) -> None:
        """Emit a parameter write; the stove never confirms it.

        Raises:
            CommandFailedError: If the emission itself fails.

        """
        request = f"{LEGACY_WRITE_PREFIX}|{sensor.sensor_id}|{format_command_value(value)}"
        try:
            await self._async_emit_request(request)
        except MaestroError as err:
            command_error = f"Command {sensor.sensor_id} failed: {err}"
            raise CommandFailedError(command_error, connection_lost=True) from err

    async def async_ping(self, appliance: Appliance) -> None:  # noqa: ARG002
        """Ask the stove for fresh telemetry as a keepalive."""
        await self._async_emit_request(LEGACY_STATUS_REQUEST)

    async def async_disconnect(self) -> None:
        """Disconnect from the gateway."""
        if self._sio is not None:
            await self._async_shutdown_client()
            _LOGGER.info("Disconnected from MCZ Socket.IO gateway")

    async def _async_shutdown_client(self) -> None:
        """Stop the current client, including any reconnection in progress."""
        try:
            await self._sio.shutdown()
        except socketio.exceptions.SocketIOError:
            _LOGGER.exception("Error disconnecting from MCZ Socket.IO gateway")
        finally:
            self._connected = False
            self._sio = None
