"""Tests for modbus_bench/config.py"""

from modbus_bench.config import AppConfig


def test_defaults(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    config = AppConfig.create_default()

    assert config.server.port == 5502
    assert config.server.unit_id == 1
    assert config.client.retries == 2
    assert config.system.simulation_interval == 2.0
    assert config.system.debug is False


def test_debug_from_environment(monkeypatch):
    monkeypatch.setenv("DEBUG", "1")
    assert AppConfig.create_default().system.debug is True
    assert AppConfig.create_default(debug=False).system.debug is False
