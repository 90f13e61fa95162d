"""Real pymodbus client implementation."""

from typing import Any, List

from pymodbus import FramerType
from pymodbus.client import ModbusSerialClient, ModbusTcpClient
from pymodbus.exceptions import ModbusException

from .interface import ModbusInterface

# Errors that mean the request never got an answer
COMM_ERRORS = (ModbusException, OSError)


class ModbusClient(ModbusInterface):
    """Wrapper around the pymodbus TCP and serial RTU clients."""

    def __init__(
        self,
        transport: str = "tcp",
        host: str = "localhost",
        port: int = 5502,
        serial_port: str = "/dev/ttyUSB0",
        baudrate: int = 19200,
        timeout: float = 3.0,
        retries: int = 0
    ):
        """Initialize Modbus client.

        Args:
            transport: "tcp" or "rtu"
            host: IP address or hostname of the slave (tcp)
            port: Modbus TCP port
            serial_port: Serial device (rtu)
            baudrate: Serial speed (rtu)
            timeout: Request timeout in seconds
            retries: pymodbus-level retries; the service layer does its own

        Raises:
            ValueError: If the transport is unknown
        """
        self.transport = transport
        self.host = host
        self.port = port
        if transport == "tcp":
            self._client = ModbusTcpClient(host=host, port=port, timeout=timeout, retries=retries)
        elif transport == "rtu":
            self._client = ModbusSerialClient(
                port=serial_port,
                framer=FramerType.RTU,
                baudrate=baudrate,
                timeout=timeout,
                retries=retries,
            )
        else:
            raise ValueError(f"unknown transport: {transport}")

    def connect(self) -> bool:
        try:
            return bool(self._client.connect())
        except COMM_ERRORS:
            return False

    def close(self) -> None:
        try:
            self._client.close()
        except OSError:
            # Connection may already be broken
            pass

    def is_connected(self) -> bool:
        return bool(self._client.connected)

    def read_coils(self, address: int, count: int = 1, device_id: int = 1) -> Any:
        try:
            return self._client.read_coils(address, count=count, device_id=device_id)
        except COMM_ERRORS:
            return None

    def read_discrete_inputs(self, address: int, count: int = 1, device_id: int = 1) -> Any:
        try:
            return self._client.read_discrete_inputs(address, count=count, device_id=device_id)
        except COMM_ERRORS:
            return None

    def read_holding_registers(self, address: int, count: int = 1, device_id: int = 1) -> Any:
        try:
            return self._client.read_holding_registers(address, count=count, device_id=device_id)
        except COMM_ERRORS:
            return None

    def read_input_registers(self, address: int, count: int = 1, device_id: int = 1) -> Any:
        try:
            return self._client.read_input_registers(address, count=count, device_id=device_id)
        except COMM_ERRORS:
            return None

    def write_coil(self, address: int, value: bool, device_id: int = 1) -> Any:
        try:
            return self._client.write_coil(address, value, device_id=device_id)
        except COMM_ERRORS:
            return None

    def write_register(self, address: int, value: int, device_id: int = 1) -> Any:
        try:
            return self._client.write_register(address, value, device_id=device_id)
        except COMM_ERRORS:
            return None

    def write_coils(self, address: int, values: List[bool], device_id: int = 1) -> Any:
        try:
            return self._client.write_coils(address, values, device_id=device_id)
        except COMM_ERRORS:
            return None

    def write_registers(self, address: int, values: List[int], device_id: int = 1) -> Any:
        try:
            return self._client.write_registers(address, values, device_id=device_id)
        except COMM_ERRORS:
            return None
