"""Tests for modbus_bench/server/adapter.py"""

import pytest

from modbus_bench.server.adapter import AdapterHandler
from modbus_bench.server.errors import IllegalValue, RangeAccessError
from modbus_bench.server.handler import ModbusHandler
from modbus_bench.server.requests import (
    CoilsRequest,
    DiscreteInputsRequest,
    HoldingRegistersRequest,
    InputRegistersRequest,
)


@pytest.fixture
def adapter(store, log_manager):
    return AdapterHandler(ModbusHandler(store, log_manager), log_manager)


def test_read_coils(adapter):
    response = adapter.handle_coils(CoilsRequest(1, 10, 3))

    assert not response.isError()
    assert response.bits == [False, True, False]


def test_read_only_tables(adapter):
    assert adapter.handle_discrete_inputs(DiscreteInputsRequest(1, 10071, 1)).bits == [False]
    assert adapter.handle_input_registers(InputRegistersRequest(1, 30022, 2)).registers == [512, 0]


def test_single_write_uses_first_arg(adapter, store):
    response = adapter.handle_coils(CoilsRequest(1, 12, 1, is_write=True, args=[True]))

    assert not response.isError()
    assert response.values is None
    assert store.get_coil(12) is True


def test_multiple_write_truncates_args_to_quantity(adapter, store):
    request = HoldingRegistersRequest(1, 44883, 2, is_write=True, args=[10, 20, 30])

    response = adapter.handle_holding_registers(request)

    assert not response.isError()
    assert store.get_holding_register(44883) == 10
    assert store.get_holding_register(44884) == 20


def test_read_ignores_args(adapter):
    request = HoldingRegistersRequest(1, 44884, 1, args=[99])
    assert adapter.handle_holding_registers(request).registers == [7]


def test_zero_quantity_is_illegal(adapter):
    response = adapter.handle_input_registers(InputRegistersRequest(1, 30022, 0))

    assert response.isError()
    assert isinstance(response.error, IllegalValue)


def test_write_with_missing_args_is_illegal(adapter, store):
    response = adapter.handle_coils(CoilsRequest(1, 10, 2, is_write=True, args=[True]))

    assert isinstance(response.error, IllegalValue)
    assert store.get_coil(10) is False


def test_handler_errors_returned_not_raised(adapter, log_manager):
    response = adapter.handle_coils(CoilsRequest(1, 12, 2))

    assert isinstance(response.error, RangeAccessError)
    assert response.values is None
    errors = [e.message for e in log_manager.get_recent_events(count=20) if e.level == "ERROR"]
    assert any(m.startswith("handle coils:") for m in errors)


def test_requests_are_logged(adapter, log_manager):
    adapter.handle_holding_registers(HoldingRegistersRequest(3, 44883, 1, is_write=True, args=[42]))

    entry = log_manager.get_recent_requests(count=1)[0]
    assert entry.kind == "holding_registers"
    assert entry.unit_id == 3
    assert entry.address == 44883
    assert entry.is_write
    assert entry.args == [42]
