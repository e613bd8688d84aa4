"""Local WebSocket client for MCZ Maestro stoves.

This module talks to the WebSocket server embedded in the stove's Wi-Fi
module. Every request carries an increasing ``id`` and the stove echoes
that id in its answer, so responses are matched through a table of
pending futures.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections import deque
from typing import Any

import aiohttp

from .const import LOCAL_CONNECT_TIMEOUT, LOCAL_MESSAGE_TIMEOUT, LOCAL_PORT
from .exceptions import (
    CommandFailedError,
    ConnectionTimeoutError,
    MaestroConnectionError,
    MaestroError,
    MessageTimeoutError,
    ModelUnavailableError,
)
from .models import Appliance, SensorIds, StoveModel, StoveState, StoveStatus

_LOGGER = logging.getLogger(__name__)


class LocalMaestroClient:
    """Client for the stove's local WebSocket server.

    Messages sent while the socket is closed are queued and flushed in
    order as soon as a reconnection succeeds.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        host: str,
        port: int = LOCAL_PORT,
    ) -> None:
        """Initialize the client.

        Args:
            session: aiohttp session used to open the WebSocket.
            host: IPv4 address of the stove.
            port: Port of the stove's WebSocket server.

        """
        self._session = session
        self.host = host
        self.port = port
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._connect_lock = asyncio.Lock()
        self._pending: dict[int, asyncio.Future[dict[str, Any]]] = {}
        self._queue: deque[str] = deque()
        self._message_id = 0

    @property
    def url(self) -> str:
        """Return the WebSocket URL of the stove."""
        return f"ws://{self.host}:{self.port}"

    @property
    def connected(self) -> bool:
        """Return True if the WebSocket is open."""
        return self._ws is not None and not self._ws.closed

    async def async_connect(self) -> None:
        """Open the WebSocket and flush queued messages.

        Raises:
            ConnectionTimeoutError: If the stove does not answer in time.
            MaestroConnectionError: If the connection is refused.

        """
        async with self._connect_lock:
            if self.connected:
                return

            _LOGGER.info("Connecting to MCZ stove at %s", self.url)
            try:
                async with asyncio.timeout(LOCAL_CONNECT_TIMEOUT):
                    self._ws = await self._session.ws_connect(self.url)
            except TimeoutError as err:
                timeout_error = f"Timed out connecting to {self.url}"
                raise ConnectionTimeoutError(timeout_error) from err
            except aiohttp.ClientError as err:
                connection_error = f"Cannot connect to {self.url}: {err}"
                raise MaestroConnectionError(connection_error) from err

            _LOGGER.info("Connected to MCZ stove at %s", self.url)
            self._reader_task = asyncio.create_task(self._async_read_loop(self._ws))

            while self._queue:
                await self._ws.send_str(self._queue.popleft())

    async def async_login(self) -> None:
        """Connect to the stove; the local server has no authentication."""
        if not self.connected:
            await self.async_connect()

    async def async_disconnect(self) -> None:
        """Close the WebSocket and stop the reader."""
        ws, self._ws = self._ws, None
        for task in (self._connect_task, self._reader_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._connect_task = None
        self._reader_task = None

        if ws is not None:
            await ws.close()
            _LOGGER.info("Disconnected from MCZ stove at %s", self.url)

    def _schedule_connect(self) -> None:
        """Start a reconnection unless one is already running."""
        if self._connect_task is not None and not self._connect_task.done():
            return
        self._connect_task = asyncio.create_task(self._async_reconnect())

    async def _async_reconnect(self) -> None:
        try:
            await self.async_connect()
        except MaestroError as err:
            _LOGGER.warning("Reconnection to %s failed: %s", self.url, err)
            self._queue.clear()
            for future in self._pending.values():
                if not future.done():
                    future.set_exception(err)

    async def _async_read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            while True:
                msg = await ws.receive()
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._handle_message(msg.data)
                    continue
                if msg.type in (
                    aiohttp.WSMsgType.CLOSE,
                    aiohttp.WSMsgType.CLOSED,
                    aiohttp.WSMsgType.CLOSING,
                    aiohttp.WSMsgType.ERROR,
                ):
                    _LOGGER.info("WebSocket to %s closed (%s)", self.url, msg.type)
                    break
        except (aiohttp.ClientError, RuntimeError) as err:
            _LOGGER.warning("WebSocket to %s failed: %s", self.url, err)
        finally:
            if self._ws is ws:
                self._ws = None

    def _handle_message(self, raw: str) -> None:
        """Resolve the pending request matching an incoming message."""
        try:
            message = json.loads(raw)
        except ValueError:
            _LOGGER.warning("Dropping malformed message from stove: %.200s", raw)
            return

        if not isinstance(message, dict) or "id" not in message:
            _LOGGER.debug("Dropping message without id: %.200s", raw)
            return

        future = self._pending.pop(message["id"], None)
        if future is None:
            _LOGGER.debug("Dropping message with unknown id %s", message["id"])
            return

        if not future.done():
            future.set_result(message)

    async def _async_request(
        self,
        message_type: str,
        **fields: Any,  # noqa: ANN401
    ) -> dict[str, Any]:
        """Send a message and wait for the response carrying the same id.

        Raises:
            MessageTimeoutError: If no matching response arrives in time.

        """
        self._message_id += 1
        message_id = self._message_id
        payload = json.dumps({"type": message_type, "id": message_id, **fields})
        future: asyncio.Future[dict[str, Any]] = (
            asyncio.get_running_loop().create_future()
        )
        self._pending[message_id] = future

        try:
            if self.connected:
                await self._ws.send_str(payload)
            else:
                _LOGGER.debug("Queueing message %s until reconnected", message_id)
                self._queue.append(payload)
                self._schedule_connect()

            async with asyncio.timeout(LOCAL_MESSAGE_TIMEOUT):
                return await future
        except TimeoutError as err:
            timeout_error = f"No response to {message_type} message {message_id}"
            raise MessageTimeoutError(timeout_error) from err
        except (aiohttp.ClientError, ConnectionResetError) as err:
            connection_error = f"Cannot send to {self.url}: {err}"
            raise MaestroConnectionError(connection_error) from err
        finally:
            self._pending.pop(message_id, None)

    async def async_get_appliances(self) -> list[Appliance]:
        """Return the stove this client is connected to."""
        return [
            Appliance(
                id=f"local_{self.host}",
                name=f"MCZ Stove ({self.host})",
                serial_number=self.host,
                model_id="local",
                sensor_set_type_id="local",
            )
        ]

    async def async_get_model(self, model_id: str) -> StoveModel:
        """Model descriptions are only published by the cloud."""
        unavailable = f"Model {model_id} not available over the local connection"
        raise ModelUnavailableError(unavailable)

    async def async_get_status(self, appliance: Appliance) -> StoveStatus:  # noqa: ARG002
        """Fetch the current telemetry of the stove."""
        response = await self._async_request("status")
        return StoveStatus.from_payload(response.get("data") or {})

    async def async_get_state(self, appliance: Appliance) -> StoveState:  # noqa: ARG002
        """Fetch the current settings of the stove."""
        response = await self._async_request("state")
        return StoveState.from_payload(response.get("data") or {})

    async def async_send_command(
        self,
        appliance: Appliance,  # noqa: ARG002
        sensor: SensorIds,
        value: Any,  # noqa: ANN401
    ) -> None:
        """Write one sensor value and wait for the stove to acknowledge it.

        Raises:
            CommandFailedError: If the command is not acknowledged.

        """
        _LOGGER.debug("Sending command: sensor=%s, value=%s", sensor.sensor_id, value)
        try:
            await self._async_request(
                "command", sensor=sensor.sensor_id, value=value
            )
        except MaestroConnectionError as err:
            command_error = f"Command {sensor.sensor_id} failed: {err}"
            raise CommandFailedError(command_error, connection_lost=True) from err
        except MaestroError as err:
            command_error = f"Command {sensor.sensor_id} failed: {err}"
            raise CommandFailedError(command_error) from err

    async def async_ping(self, appliance: Appliance) -> dict[str, Any]:  # noqa: ARG002
        """Send a keepalive to the stove."""
        return await self._async_request("ping")
