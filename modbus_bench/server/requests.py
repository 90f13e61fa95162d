"""Decoded request shapes and the request handler interface.

The transport decodes each Modbus PDU into one of the four request types
below and hands it to a RequestHandler. Handlers answer with a Response
instead of raising, so that the stages of the pipeline can inspect and
reshape results and errors on the way back up.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ModbusError


@dataclass
class CoilsRequest:
    """Read coils (0x01), write single coil (0x05), write multiple coils (0x0F)."""
    unit_id: int
    address: int
    quantity: int
    is_write: bool = False
    args: List[bool] = field(default_factory=list)


@dataclass
class DiscreteInputsRequest:
    """Read discrete inputs (0x02)."""
    unit_id: int
    address: int
    quantity: int


@dataclass
class HoldingRegistersRequest:
    """Read holding registers (0x03), write single (0x06) / multiple (0x10) registers."""
    unit_id: int
    address: int
    quantity: int
    is_write: bool = False
    args: List[int] = field(default_factory=list)


@dataclass
class InputRegistersRequest:
    """Read input registers (0x04)."""
    unit_id: int
    address: int
    quantity: int


@dataclass
class Response:
    """Result of handling one request.

    values holds coil/discrete input bools or register ints (None for
    writes and failures); error is the ModbusError the request failed
    with, if any.
    """
    values: Optional[list] = None
    error: Optional[ModbusError] = None

    def isError(self) -> bool:
        """pymodbus-style error check."""
        return self.error is not None

    def is_error(self) -> bool:
        return self.error is not None

    @property
    def bits(self) -> list:
        return list(self.values or [])

    @property
    def registers(self) -> list:
        return list(self.values or [])


class RequestHandler(ABC):
    """Interface shared by every stage of the slave pipeline."""

    @abstractmethod
    def handle_coils(self, request: CoilsRequest) -> Response:
        pass

    @abstractmethod
    def handle_discrete_inputs(self, request: DiscreteInputsRequest) -> Response:
        pass

    @abstractmethod
    def handle_holding_registers(self, request: HoldingRegistersRequest) -> Response:
        pass

    @abstractmethod
    def handle_input_registers(self, request: InputRegistersRequest) -> Response:
        pass
