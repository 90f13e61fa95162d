"""Tests for modbus_bench/client/service.py"""

import pytest

from modbus_bench.client.errors import ClientError, ModbusRequestError, NoClient
from modbus_bench.client.service import ModbusService


class FakeResponse:
    def __init__(self, bits=None, registers=None, exception_code=None):
        self.bits = bits or []
        self.registers = registers or []
        self.exception_code = exception_code

    def isError(self):
        return self.exception_code is not None


class ScriptedClient:
    """Returns queued answers, one per request."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []

    def _next(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        return self.answers.pop(0)

    def read_coils(self, address, count=1, device_id=1):
        return self._next("read_coils", address, count=count, device_id=device_id)

    def read_holding_registers(self, address, count=1, device_id=1):
        return self._next("read_holding_registers", address, count=count, device_id=device_id)

    def write_registers(self, address, values, device_id=1):
        return self._next("write_registers", address, values, device_id=device_id)


class FakeManager:
    def __init__(self, client, reconnect_error=None):
        self.client = client
        self.reconnects = 0
        self.reconnect_error = reconnect_error

    def get_client(self):
        if self.client is None:
            raise NoClient()
        return self.client

    def reconnect(self):
        self.reconnects += 1
        if self.reconnect_error:
            raise self.reconnect_error


def test_success_first_try(log_manager):
    client = ScriptedClient([FakeResponse(bits=[True, False] + [False] * 6)])
    manager = FakeManager(client)
    service = ModbusService(manager, log_manager, unit_id=4)

    assert service.read_coils(10, 2) == [True, False]
    assert manager.reconnects == 0
    assert client.calls == [("read_coils", (10,), {'count': 2, 'device_id': 4})]


def test_retries_with_reconnect_until_success(log_manager):
    client = ScriptedClient([None, None, FakeResponse(registers=[5, 6])])
    manager = FakeManager(client)
    service = ModbusService(manager, log_manager)

    assert service.read_holding_registers(0, 2) == [5, 6]
    assert manager.reconnects == 2
    warnings = [e.message for e in log_manager.get_recent_events(count=50) if e.level == "WARNING"]
    assert any("attempts left: 2" in w for w in warnings)
    assert any("attempts left: 1" in w for w in warnings)


def test_gives_up_after_three_attempts(log_manager):
    client = ScriptedClient([None, None, None, FakeResponse(registers=[1])])
    manager = FakeManager(client)
    service = ModbusService(manager, log_manager)

    with pytest.raises(ModbusRequestError, match="no response"):
        service.read_holding_registers(0, 1)

    assert len(client.calls) == 3
    assert manager.reconnects == 2


def test_exception_response_carries_code(log_manager):
    answers = [FakeResponse(exception_code=2) for _ in range(3)]
    service = ModbusService(FakeManager(ScriptedClient(answers)), log_manager)

    with pytest.raises(ModbusRequestError) as exc_info:
        service.write_multiple_registers(0, [1, 2])
    assert exc_info.value.exception_code == 2


def test_missing_client_is_a_failed_attempt(log_manager):
    manager = FakeManager(None, reconnect_error=ClientError("connection refused"))
    service = ModbusService(manager, log_manager, retries=1)

    with pytest.raises(ModbusRequestError, match="no client"):
        service.read_coils(0, 1)

    assert manager.reconnects == 1
    errors = [e.message for e in log_manager.get_recent_events(count=50) if e.level == "ERROR"]
    assert "Reconnect failed: connection refused" in errors


def test_zero_retries_means_single_attempt(log_manager):
    client = ScriptedClient([None])
    manager = FakeManager(client)

    with pytest.raises(ModbusRequestError):
        ModbusService(manager, log_manager, retries=0).read_coils(0, 1)
    assert manager.reconnects == 0
