"""Tests for the MCZ Maestro Coordinator."""

import json
from typing import Any
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from homeassistant.helpers.update_coordinator import UpdateFailed
from pytest_httpx import HTTPXMock

from custom_components.mcz_maestro.api import MaestroCloudClient
from custom_components.mcz_maestro.capabilities import Capability, StoveData
from custom_components.mcz_maestro.const import BASE_URL_HLAPI, BASE_URL_MCZ
from custom_components.mcz_maestro.coordinator import MaestroCoordinator
from custom_components.mcz_maestro.exceptions import (
    CommandFailedError,
    MaestroApiError,
    SensorNotFoundError,
)
from custom_components.mcz_maestro.models import (
    Appliance,
    SensorIds,
    StoveModel,
    StoveState,
    StoveStatus,
)
from custom_components.mcz_maestro.registry import SensorRegistry
from custom_components.mcz_maestro.transport import (
    ActiveTransport,
    CloudTransport,
    LegacyTransport,
    LocalTransport,
)

LOGIN_URL = f"{BASE_URL_HLAPI}/Authorization/Login"
STATUS_URL = f"{BASE_URL_MCZ}/Appliance/appliance-1/Status"
STATE_URL = f"{BASE_URL_MCZ}/Appliance/appliance-1/State"
COMMAND_URL = f"{BASE_URL_MCZ}/Program/ActivateProgram/appliance-1"


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def mock_config_entry() -> Mock:
    """Create a mock config entry for testing."""
    entry = Mock()
    entry.entry_id = "test_entry_id"
    return entry


@pytest.fixture
def mock_client(
    sample_status_payload: dict[str, Any],
    sample_state_payload: dict[str, Any],
) -> Mock:
    """Create a mock transport client answering with sample readings."""
    client = Mock()
    client.async_get_status = AsyncMock(
        return_value=StoveStatus.from_payload(sample_status_payload)
    )
    client.async_get_state = AsyncMock(
        return_value=StoveState.from_payload(sample_state_payload)
    )
    client.async_send_command = AsyncMock()
    client.async_disconnect = AsyncMock()
    return client


def make_coordinator(
    mock_hass: Mock,
    mock_config_entry: Mock,
    transport: ActiveTransport,
    appliance: Appliance,
) -> MaestroCoordinator:
    """Create a coordinator whose reconciliation does not touch the stove."""
    coordinator = MaestroCoordinator(mock_hass, mock_config_entry, transport, appliance)
    coordinator.async_refresh = AsyncMock()
    return coordinator


@pytest.fixture
def coordinator(
    mock_hass: Mock,
    mock_config_entry: Mock,
    mock_client: Mock,
    stove_model: StoveModel,
    appliance: Appliance,
) -> MaestroCoordinator:
    """Create a coordinator driving a cloud stove through a mock client."""
    return make_coordinator(
        mock_hass,
        mock_config_entry,
        CloudTransport(mock_client, stove_model),
        appliance,
    )


class TestMaestroCoordinatorInit:
    """Tests for MaestroCoordinator initialization."""

    def test_init_sets_transport_and_interval(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
        appliance: Appliance,
    ) -> None:
        """Test that init keeps the transport and polls every 30 seconds."""
        assert coordinator.client is mock_client
        assert coordinator.reader is mock_client
        assert coordinator.appliance == appliance
        assert coordinator.name == "mcz_maestro_appliance-1"
        assert coordinator.update_interval.total_seconds() == 30

    def test_custom_scan_interval(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_client: Mock,
        appliance: Appliance,
    ) -> None:
        """Test that the scan interval option is honoured."""
        coordinator = MaestroCoordinator(
            mock_hass,
            mock_config_entry,
            LocalTransport(mock_client),
            appliance,
            scan_interval=120,
        )
        assert coordinator.update_interval.total_seconds() == 120

    def test_legacy_reader_uses_telemetry(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_client: Mock,
        appliance: Appliance,
    ) -> None:
        """Test that legacy stoves read through the cloud when asked to."""
        telemetry = Mock()
        coordinator = MaestroCoordinator(
            mock_hass,
            mock_config_entry,
            LegacyTransport(mock_client, telemetry),
            appliance,
        )
        assert coordinator.client is mock_client
        assert coordinator.reader is telemetry

    def test_supports(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_client: Mock,
        coordinator: MaestroCoordinator,
        appliance: Appliance,
    ) -> None:
        """Test that supports follows the sensors known to the transport."""
        assert coordinator.supports(Capability.FAN_SPEED_1) is True
        assert coordinator.supports(Capability.FAN_SPEED_2) is False
        assert coordinator.supports(Capability.ECO_MODE) is True

        local = MaestroCoordinator(
            mock_hass, mock_config_entry, LocalTransport(mock_client), appliance
        )
        assert local.supports(Capability.FAN_SPEED_3) is True


class TestMaestroCoordinatorUpdate:
    """Tests for MaestroCoordinator._async_update_data."""

    @pytest.mark.asyncio
    async def test_update_projects_readings(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
        appliance: Appliance,
    ) -> None:
        """Test that status and state are read and projected."""
        data = await coordinator._async_update_data()

        mock_client.async_get_status.assert_awaited_once_with(appliance)
        mock_client.async_get_state.assert_awaited_once_with(appliance)
        assert data.power_on is True
        assert data.current_temperature == 20.5
        assert data.target_temperature == 21.0
        assert data.thermostat_mode == "auto"

    @pytest.mark.asyncio
    async def test_update_raises_update_failed(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
    ) -> None:
        """Test that transport errors become UpdateFailed."""
        mock_client.async_get_state.side_effect = MaestroApiError("Request failed: 503")

        with pytest.raises(UpdateFailed, match="Update failed"):
            await coordinator._async_update_data()

    @pytest.mark.asyncio
    async def test_update_keeps_previous_values(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
    ) -> None:
        """Test that an empty state does not erase the last known setpoint."""
        coordinator.data = StoveData(target_temperature=19.0, fan_speed_1=4)
        mock_client.async_get_state.return_value = StoveState.empty()

        data = await coordinator._async_update_data()

        assert data.target_temperature == 19.0
        assert data.fan_speed_1 == 4

    @pytest.mark.asyncio
    async def test_legacy_update_reads_through_telemetry(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_client: Mock,
        appliance: Appliance,
        sample_status_payload: dict[str, Any],
    ) -> None:
        """Test that a legacy stove with telemetry never reads over Socket.IO."""
        telemetry = Mock()
        telemetry.async_get_status = AsyncMock(
            return_value=StoveStatus.from_payload(sample_status_payload)
        )
        telemetry.async_get_state = AsyncMock(return_value=StoveState.empty())
        coordinator = make_coordinator(
            mock_hass,
            mock_config_entry,
            LegacyTransport(mock_client, telemetry),
            appliance,
        )

        data = await coordinator._async_update_data()

        assert data.power_on is True
        telemetry.async_get_status.assert_awaited_once()
        mock_client.async_get_status.assert_not_called()


class TestMaestroCoordinatorExecuteCommand:
    """Tests for MaestroCoordinator.async_execute_command."""

    @pytest.mark.asyncio
    async def test_command_resolves_sensor_and_updates_data(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
        appliance: Appliance,
    ) -> None:
        """Test that a command is sent and reflected before the next poll."""
        coordinator.data = StoveData(power_on=True, target_temperature=20.0)

        with patch.object(coordinator, "async_update_listeners") as update_listeners:
            await coordinator.async_execute_command(Capability.TARGET_TEMPERATURE, 21.5)

        mock_client.async_send_command.assert_awaited_once_with(
            appliance, SensorIds(101, 1), 21.5
        )
        assert coordinator.data.target_temperature == 21.5
        assert coordinator.data.power_on is True
        update_listeners.assert_called_once()

    @pytest.mark.asyncio
    async def test_power_off_sends_40(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
        appliance: Appliance,
    ) -> None:
        """Test that turning off writes 40 to com_on_off."""
        coordinator.data = StoveData(power_on=True)

        await coordinator.async_execute_command(Capability.ONOFF, False)  # noqa: FBT003

        mock_client.async_send_command.assert_awaited_once_with(
            appliance, SensorIds(100, 1), 40
        )
        assert coordinator.data.power_on is False

    @pytest.mark.asyncio
    async def test_command_schedules_reconciliation(
        self,
        coordinator: MaestroCoordinator,
    ) -> None:
        """Test that every accepted command is followed by one refresh."""
        with patch("custom_components.mcz_maestro.coordinator.RECONCILE_DELAY", 0):
            await coordinator.async_execute_command(Capability.FAN_SPEED_1, 2)
            await coordinator._reconcile_task

        coordinator.async_refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_new_command_replaces_pending_reconciliation(
        self,
        coordinator: MaestroCoordinator,
    ) -> None:
        """Test that only the last of two quick commands is reconciled."""
        await coordinator.async_execute_command(Capability.FAN_SPEED_1, 2)
        first_task = coordinator._reconcile_task

        with patch("custom_components.mcz_maestro.coordinator.RECONCILE_DELAY", 0):
            await coordinator.async_execute_command(Capability.FAN_SPEED_1, 3)
            await coordinator._reconcile_task

        assert first_task.cancelled()
        coordinator.async_refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_essential_sensor_raises(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
    ) -> None:
        """Test that a stove without an essential sensor fails loudly."""
        coordinator.registry = SensorRegistry(static_ids={"com_on_off": 34})

        with pytest.raises(SensorNotFoundError, match="set_amb1"):
            await coordinator.async_execute_command(Capability.TARGET_TEMPERATURE, 21)

        mock_client.async_send_command.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_mode_raises_without_io(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
    ) -> None:
        """Test that an unknown thermostat mode is rejected before sending."""
        with pytest.raises(ValueError, match="Invalid thermostat mode"):
            await coordinator.async_execute_command(Capability.THERMOSTAT_MODE, "eco")

        mock_client.async_send_command.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("transport_cls", [CloudTransport, LocalTransport, LegacyTransport])
    async def test_unsupported_optional_capability_is_noop(
        self,
        transport_cls: type,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_client: Mock,
        stove_model: StoveModel,
        appliance: Appliance,
    ) -> None:
        """Test that an optional capability without sensor does no I/O."""
        if transport_cls is CloudTransport:
            transport = CloudTransport(mock_client, stove_model)
        else:
            transport = transport_cls(mock_client)
        coordinator = make_coordinator(
            mock_hass, mock_config_entry, transport, appliance
        )
        coordinator.registry = SensorRegistry(static_ids={"com_on_off": 34})
        coordinator.data = StoveData(fan_speed_2=1)

        await coordinator.async_execute_command(Capability.FAN_SPEED_2, 5)

        mock_client.async_send_command.assert_not_called()
        assert coordinator.data.fan_speed_2 == 1
        assert coordinator._reconcile_task is None

    @pytest.mark.asyncio
    async def test_connection_loss_marks_unavailable(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
    ) -> None:
        """Test that a lost connection flags the stove unavailable."""
        coordinator.data = StoveData(fan_speed_1=3)
        mock_client.async_send_command.side_effect = CommandFailedError(
            "down", connection_lost=True
        )

        with pytest.raises(CommandFailedError):
            await coordinator.async_execute_command(Capability.FAN_SPEED_1, 5)

        assert coordinator.last_update_success is False
        assert coordinator.data.fan_speed_1 == 3

    @pytest.mark.asyncio
    async def test_rejected_command_keeps_availability(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
    ) -> None:
        """Test that a command refused by the cloud leaves the stove available."""
        mock_client.async_send_command.side_effect = CommandFailedError("500")

        with pytest.raises(CommandFailedError):
            await coordinator.async_execute_command(Capability.FAN_SPEED_1, 5)

        assert coordinator.last_update_success is True
        assert coordinator._reconcile_task is None


class TestMaestroCoordinatorCloudRoundTrip:
    """Tests driving a cloud stove through the real REST client."""

    @pytest.mark.asyncio
    async def test_setpoint_change_is_reconciled(
        self,
        httpx_mock: HTTPXMock,
        mock_hass: Mock,
        mock_config_entry: Mock,
        stove_model: StoveModel,
        appliance: Appliance,
        sample_status_payload: dict[str, Any],
        sample_state_payload: dict[str, Any],
    ) -> None:
        """Test that a setpoint change is shown, sent, then re-read."""
        httpx_mock.add_response(url=LOGIN_URL, method="POST", json={"Token": "t"})
        httpx_mock.add_response(url=COMMAND_URL, method="POST", json={})
        httpx_mock.add_response(url=STATUS_URL, method="GET", json=sample_status_payload)
        httpx_mock.add_response(url=STATE_URL, method="GET", json=sample_state_payload)

        async with httpx.AsyncClient() as session:
            client = MaestroCloudClient(session, "user@example.com", "secret")
            coordinator = MaestroCoordinator(
                mock_hass,
                mock_config_entry,
                CloudTransport(client, stove_model),
                appliance,
            )
            coordinator.data = StoveData(power_on=True, target_temperature=20.0)

            async def refresh() -> None:
                coordinator.data = await coordinator._async_update_data()

            coordinator.async_refresh = AsyncMock(side_effect=refresh)

            with patch("custom_components.mcz_maestro.coordinator.RECONCILE_DELAY", 0):
                await coordinator.async_execute_command(
                    Capability.TARGET_TEMPERATURE, 21.5
                )
                assert coordinator.data.target_temperature == 21.5
                await coordinator._reconcile_task

        body = json.loads(httpx_mock.get_request(url=COMMAND_URL).content)
        assert body["ModelId"] == "model-1"
        assert body["ConfigurationId"] == "1"
        assert body["SensorSetTypeId"] == "sst-1"
        assert body["Commands"] == [{"SensorId": "101", "Value": 21.5}]
        assert coordinator.data.target_temperature == 21.0


class TestMaestroCoordinatorShutdown:
    """Tests for MaestroCoordinator.async_shutdown_transport."""

    @pytest.mark.asyncio
    async def test_shutdown_cancels_reconciliation_and_disconnects(
        self,
        coordinator: MaestroCoordinator,
        mock_client: Mock,
    ) -> None:
        """Test that shutdown stops pending work and closes the client."""
        await coordinator.async_execute_command(Capability.FAN_SPEED_1, 2)
        pending = coordinator._reconcile_task

        await coordinator.async_shutdown_transport()

        assert pending.cancelled()
        assert coordinator._reconcile_task is None
        mock_client.async_disconnect.assert_awaited_once()
        coordinator.async_refresh.assert_not_called()

    @pytest.mark.asyncio
    async def test_shutdown_disconnects_telemetry(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_client: Mock,
        appliance: Appliance,
    ) -> None:
        """Test that the legacy telemetry client is released too."""
        telemetry = Mock()
        telemetry.async_disconnect = AsyncMock()
        coordinator = make_coordinator(
            mock_hass,
            mock_config_entry,
            LegacyTransport(mock_client, telemetry),
            appliance,
        )

        await coordinator.async_shutdown_transport()

        mock_client.async_disconnect.assert_awaited_once()
        telemetry.async_disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_closes_http_session(
        self,
        mock_hass: Mock,
        mock_config_entry: Mock,
        mock_client: Mock,
        stove_model: StoveModel,
        appliance: Appliance,
    ) -> None:
        """Test that the HTTP client owned by the entry is closed once."""
        http_session = Mock()
        http_session.aclose = AsyncMock()
        coordinator = MaestroCoordinator(
            mock_hass,
            mock_config_entry,
            CloudTransport(mock_client, stove_model),
            appliance,
            http_session=http_session,
        )

        await coordinator.async_shutdown_transport()
        await coordinator.async_shutdown_transport()

        http_session.aclose.assert_awaited_once()
        assert mock_client.async_disconnect.await_count == 2
