"""Transport abstraction for MCZ Maestro stoves.

Three incompatible transports can reach a stove. Each client implements
``MaestroTransport``; the transport picked for an appliance is one of the
``ActiveTransport`` variants, which also carries what only that transport
needs (the fetched model for the cloud, the telemetry client for legacy
stoves).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .api import MaestroCloudClient
    from .legacy import SocketIOMaestroClient
    from .local import LocalMaestroClient
    from .models import Appliance, SensorIds, StoveModel, StoveState, StoveStatus


class MaestroTransport(Protocol):
    """Operations every stove transport provides."""

    async def async_login(self) -> None:
        """Authenticate or connect."""

    async def async_disconnect(self) -> None:
        """Release the connection or session."""

    async def async_get_appliances(self) -> list[Appliance]:
        """Return the appliances reachable through this transport."""

    async def async_get_model(self, model_id: str) -> StoveModel:
        """Return the sensor model of an appliance."""

    async def async_get_status(self, appliance: Appliance) -> StoveStatus:
        """Return the current telemetry of an appliance."""

    async def async_get_state(self, appliance: Appliance) -> StoveState:
        """Return the current settings of an appliance."""

    async def async_send_command(
        self,
        appliance: Appliance,
        sensor: SensorIds,
        value: Any,  # noqa: ANN401
    ) -> None:
        """Write one sensor value."""

    async def async_ping(self, appliance: Appliance) -> Any:  # noqa: ANN401
        """Send a keepalive."""


class TransportKind(StrEnum):
    """Transport used to reach a stove."""

    CLOUD = "cloud"
    LOCAL = "local"
    LEGACY = "legacy"


@dataclass(frozen=True, slots=True)
class CloudTransport:
    """Second generation stove driven through the cloud REST API."""

    client: MaestroCloudClient
    model: StoveModel
    kind: TransportKind = field(default=TransportKind.CLOUD, init=False)


@dataclass(frozen=True, slots=True)
class LocalTransport:
    """Stove driven through its own WebSocket server."""

    client: LocalMaestroClient
    kind: TransportKind = field(default=TransportKind.LOCAL, init=False)


@dataclass(frozen=True, slots=True)
class LegacyTransport:
    """First generation stove driven through the Socket.IO gateway.

    Attributes:
        client: Socket.IO client, used for commands and, without telemetry,
            for reads.
        telemetry: Logged-in cloud client used for reads, or None.

    """

    client: SocketIOMaestroClient
    telemetry: MaestroCloudClient | None = None
    kind: TransportKind = field(default=TransportKind.LEGACY, init=False)


type ActiveTransport = CloudTransport | LocalTransport | LegacyTransport
