"""Shared fixtures for the test suite."""

import pytest

from modbus_bench.config import AppConfig
from modbus_bench.logging_system import LogManager
from modbus_bench.server.middleware import build_pipeline
from modbus_bench.server.store import Coil, Dump, ModbusStore, Register


@pytest.fixture
def log_manager():
    """In-memory LogManager recording every level."""
    return LogManager(max_entries=500, debug_mode=True, persist=False)


@pytest.fixture
def seed_dump():
    """Small seed with a gap after coil 12."""
    return Dump(
        coils=[Coil(10, False), Coil(11, True), Coil(12, False)],
        discrete_inputs=[Coil(10, True), Coil(10071, False)],
        holding_registers=[Register(44883, 0), Register(44884, 7)],
        input_registers=[Register(30022, 512), Register(30023, 0)],
    )


@pytest.fixture
def store(seed_dump):
    return ModbusStore.from_dump(seed_dump)


@pytest.fixture
def pipeline(store, log_manager):
    return build_pipeline(store, log_manager, unit_id=1)


@pytest.fixture
def app_config(tmp_path):
    config = AppConfig.create_default(debug=False)
    config.system.log_file = str(tmp_path / "events.jsonl")
    config.system.simulation_interval = 0.05
    return config
