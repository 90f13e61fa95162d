"""Modbus master: clients, connection management and retrying operations."""

from .client import ModbusClient
from .errors import ClientError, ModbusRequestError, NoClient, NotConnected
from .factory import create_modbus_client
from .interface import ModbusInterface
from .manager import ClientManager
from .mock import MockModbusClient
from .service import ModbusService

__all__ = [
    "ClientError",
    "ClientManager",
    "MockModbusClient",
    "ModbusClient",
    "ModbusInterface",
    "ModbusRequestError",
    "ModbusService",
    "NoClient",
    "NotConnected",
    "create_modbus_client",
]
