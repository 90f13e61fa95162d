"""Abstract interface for the Modbus master."""

from abc import ABC, abstractmethod
from typing import Any, List


class ModbusInterface(ABC):
    """One connection to a slave, one method per supported function code.

    Request methods hand back whatever response object the implementation
    produces, as long as it offers ``isError()`` plus ``.bits`` for bit
    tables and ``.registers`` for register tables. None means the request
    never got an answer (connection lost, timeout).
    """

    @abstractmethod
    def connect(self) -> bool:
        """Open the connection; False if the slave is unreachable."""

    @abstractmethod
    def close(self) -> None:
        """Drop the connection. Safe to call on a broken one."""

    @abstractmethod
    def is_connected(self) -> bool:
        ...

    # Bit tables

    @abstractmethod
    def read_coils(self, address: int, count: int = 1, device_id: int = 1) -> Any:
        """0x01"""

    @abstractmethod
    def read_discrete_inputs(self, address: int, count: int = 1, device_id: int = 1) -> Any:
        """0x02"""

    @abstractmethod
    def write_coil(self, address: int, value: bool, device_id: int = 1) -> Any:
        """0x05"""

    @abstractmethod
    def write_coils(self, address: int, values: List[bool], device_id: int = 1) -> Any:
        """0x0F"""

    # Register tables

    @abstractmethod
    def read_holding_registers(self, address: int, count: int = 1, device_id: int = 1) -> Any:
        """0x03"""

    @abstractmethod
    def read_input_registers(self, address: int, count: int = 1, device_id: int = 1) -> Any:
        """0x04"""

    @abstractmethod
    def write_register(self, address: int, value: int, device_id: int = 1) -> Any:
        """0x06"""

    @abstractmethod
    def write_registers(self, address: int, values: List[int], device_id: int = 1) -> Any:
        """0x10"""
