"""Factory for creating Modbus client instances."""

from typing import Optional

from ..server.requests import RequestHandler
from .client import ModbusClient
from .interface import ModbusInterface
from .mock import MockModbusClient


def create_modbus_client(
    transport: str = "tcp",
    host: str = "localhost",
    port: int = 5502,
    mock: bool = False,
    pipeline: Optional[RequestHandler] = None,
    serial_port: str = "/dev/ttyUSB0",
    baudrate: int = 19200,
    timeout: float = 3.0,
    retries: int = 0
) -> ModbusInterface:
    """Create a Modbus client instance.

    Args:
        transport: "tcp" or "rtu" (real client only)
        host: IP address or hostname of the slave
        port: Modbus TCP port
        mock: If True, return a MockModbusClient answering from pipeline
        pipeline: Slave pipeline for the mock client
        serial_port: Serial device (rtu only)
        baudrate: Serial speed (rtu only)
        timeout: Request timeout in seconds (real client only)
        retries: pymodbus-level retries (real client only)

    Returns:
        ModbusInterface: Either ModbusClient or MockModbusClient instance

    Example:
        client = create_modbus_client("tcp", "192.168.1.100", 502)
        client.connect()
        result = client.read_coils(0, count=8)
        client.close()
    """
    if mock:
        if pipeline is None:
            raise ValueError("mock client needs a slave pipeline")
        return MockModbusClient(pipeline, host=host, port=port)

    return ModbusClient(
        transport=transport,
        host=host,
        port=port,
        serial_port=serial_port,
        baudrate=baudrate,
        timeout=timeout,
        retries=retries,
    )
