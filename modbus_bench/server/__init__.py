"""Modbus slave: store, request pipeline, pymodbus bridge and UIs."""

from .controller import SlaveController
from .errors import (
    AddressNotFound,
    IllegalValue,
    ModbusError,
    RangeAccessError,
    SeedError,
    ServerError,
    UnsupportedUnit,
)
from .handler import ModbusHandler
from .middleware import FallbackMiddleware, ValidationMiddleware, build_pipeline
from .requests import (
    CoilsRequest,
    DiscreteInputsRequest,
    HoldingRegistersRequest,
    InputRegistersRequest,
    RequestHandler,
    Response,
)
from .seed import parse_seed, read_seed
from .store import Dump, ModbusStore, Table

__all__ = [
    "AddressNotFound",
    "CoilsRequest",
    "DiscreteInputsRequest",
    "Dump",
    "FallbackMiddleware",
    "HoldingRegistersRequest",
    "IllegalValue",
    "InputRegistersRequest",
    "ModbusError",
    "ModbusHandler",
    "ModbusStore",
    "RangeAccessError",
    "RequestHandler",
    "Response",
    "SeedError",
    "ServerError",
    "SlaveController",
    "Table",
    "UnsupportedUnit",
    "ValidationMiddleware",
    "build_pipeline",
    "parse_seed",
    "read_seed",
]
