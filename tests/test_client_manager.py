"""Tests for modbus_bench/client/manager.py and the mock client."""

import pytest

from modbus_bench.client import (
    ClientError,
    ClientManager,
    MockModbusClient,
    ModbusClient,
    ModbusRequestError,
    ModbusService,
    NoClient,
    NotConnected,
    create_modbus_client,
)
from modbus_bench.server.errors import ILLEGAL_FUNCTION


@pytest.fixture
def manager(app_config, log_manager, pipeline):
    return ClientManager(app_config.client, log_manager, mock_pipeline=pipeline)


# ---------------------------------------------------------------------------
# Factory and mock client
# ---------------------------------------------------------------------------

def test_factory_builds_mock(pipeline):
    client = create_modbus_client(mock=True, pipeline=pipeline)
    assert isinstance(client, MockModbusClient)


def test_factory_mock_needs_pipeline():
    with pytest.raises(ValueError):
        create_modbus_client(mock=True)


def test_factory_builds_real_tcp_client():
    client = create_modbus_client("tcp", "127.0.0.1", 1502)
    assert isinstance(client, ModbusClient)
    assert not client.is_connected()


def test_factory_rejects_unknown_transport():
    with pytest.raises(ValueError):
        create_modbus_client("udp", "127.0.0.1", 1502)


def test_mock_client_round_trip(pipeline):
    client = MockModbusClient(pipeline)
    assert client.read_coils(10, 1) is None

    client.connect()
    assert not client.write_coils(10, [True, True]).isError()
    assert client.read_coils(10, 3).bits == [True, True, False]
    assert not client.write_register(44884, 11).isError()
    assert client.read_holding_registers(44883, 2).registers == [0, 11]
    assert client.read_discrete_inputs(10071, 1).bits == [False]
    assert client.read_input_registers(30022, 1).registers == [512]


def test_mock_client_error_response(pipeline):
    client = MockModbusClient(pipeline)
    client.connect()

    response = client.read_coils(10, 1, device_id=3)

    assert response.isError()
    assert response.error.exception_code == ILLEGAL_FUNCTION


# ---------------------------------------------------------------------------
# ClientManager
# ---------------------------------------------------------------------------

def test_get_client_before_connect(manager):
    with pytest.raises(NoClient):
        manager.get_client()


def test_connect_requires_parameters(manager):
    with pytest.raises(ClientError, match="transport unknown"):
        manager.connect()
    with pytest.raises(ClientError, match="port unknown"):
        manager.connect("tcp", "localhost")


def test_connect_default(manager):
    manager.connect_default()

    assert manager.is_connected
    assert manager.describe() == "tcp://localhost:5502"
    assert isinstance(manager.get_client(), MockModbusClient)


def test_disconnect_and_reconnect(manager):
    manager.connect("tcp", "plc", 1502)
    first = manager.get_client()

    manager.disconnect()
    with pytest.raises(NoClient):
        manager.get_client()

    manager.reconnect()
    second = manager.get_client()
    assert second is not first
    assert manager.describe() == "tcp://plc:1502"


def test_disconnect_without_client_is_noop(manager):
    manager.disconnect()
    manager.disconnect()


def test_dropped_connection_reported(manager):
    manager.connect_default()
    manager.get_client().close()

    with pytest.raises(NotConnected):
        manager.get_client()


# ---------------------------------------------------------------------------
# Service over the mock client
# ---------------------------------------------------------------------------

def test_service_against_mock(manager, log_manager, store):
    manager.connect_default()
    service = ModbusService(manager, log_manager)

    service.write_single_coil(12, True)
    service.write_multiple_registers(44883, [100, 200])
    service.write_single_register(44883, 101)
    service.write_multiple_coils(10, [True, False])

    assert service.read_coils(10, 3) == [True, False, True]
    assert service.read_holding_registers(44883, 2) == [101, 200]
    assert service.read_discrete_inputs(10, 1) == [True]
    assert service.read_input_registers(30022, 2) == [512, 0]
    assert store.get_holding_register(44884) == 200


def test_service_recovers_after_reconnect(manager, log_manager):
    manager.connect_default()
    manager.get_client().fail_next = 10
    service = ModbusService(manager, log_manager)

    assert service.read_input_registers(30022, 1) == [512]
    warnings = [e for e in log_manager.get_recent_events(count=100) if e.level == "WARNING"]
    assert len(warnings) == 1


def test_service_reports_slave_exception(manager, log_manager):
    manager.connect_default()
    service = ModbusService(manager, log_manager)

    with pytest.raises(ModbusRequestError) as exc_info:
        service.read_coils(12, 2)
    assert exc_info.value.exception_code == 2
