"""Mock Modbus client answering from an in-process slave pipeline."""

from typing import List, Optional

from ..server.requests import (
    CoilsRequest,
    DiscreteInputsRequest,
    HoldingRegistersRequest,
    InputRegistersRequest,
    RequestHandler,
    Response,
)
from .interface import ModbusInterface


class MockModbusClient(ModbusInterface):
    """Client that skips the wire and calls a slave pipeline directly.

    Useful for exercising the master side without a server. While
    disconnected every request returns None, like the real client does
    when the connection is gone.
    """

    def __init__(self, pipeline: RequestHandler, host: str = "mock", port: int = 5502):
        """Initialize mock Modbus client.

        Args:
            pipeline: Slave request pipeline to answer from
            host: Placeholder host (not used in mock)
            port: Placeholder port (not used in mock)
        """
        self.pipeline = pipeline
        self.host = host
        self.port = port
        self._connected = False
        self.fail_next = 0  # Requests to drop before answering again

    def connect(self) -> bool:
        self._connected = True
        return True

    def close(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def read_coils(self, address: int, count: int = 1, device_id: int = 1) -> Optional[Response]:
        return self._send(self.pipeline.handle_coils, CoilsRequest(device_id, address, count))

    def read_discrete_inputs(self, address: int, count: int = 1, device_id: int = 1) -> Optional[Response]:
        return self._send(
            self.pipeline.handle_discrete_inputs, DiscreteInputsRequest(device_id, address, count)
        )

    def read_holding_registers(self, address: int, count: int = 1, device_id: int = 1) -> Optional[Response]:
        return self._send(
            self.pipeline.handle_holding_registers, HoldingRegistersRequest(device_id, address, count)
        )

    def read_input_registers(self, address: int, count: int = 1, device_id: int = 1) -> Optional[Response]:
        return self._send(
            self.pipeline.handle_input_registers, InputRegistersRequest(device_id, address, count)
        )

    def write_coil(self, address: int, value: bool, device_id: int = 1) -> Optional[Response]:
        return self.write_coils(address, [value], device_id=device_id)

    def write_register(self, address: int, value: int, device_id: int = 1) -> Optional[Response]:
        return self.write_registers(address, [value], device_id=device_id)

    def write_coils(self, address: int, values: List[bool], device_id: int = 1) -> Optional[Response]:
        request = CoilsRequest(device_id, address, len(values), is_write=True, args=list(values))
        return self._send(self.pipeline.handle_coils, request)

    def write_registers(self, address: int, values: List[int], device_id: int = 1) -> Optional[Response]:
        request = HoldingRegistersRequest(device_id, address, len(values), is_write=True, args=list(values))
        return self._send(self.pipeline.handle_holding_registers, request)

    def _send(self, handle, request) -> Optional[Response]:
        if not self._connected:
            return None
        if self.fail_next > 0:
            self.fail_next -= 1
            return None
        return handle(request)
