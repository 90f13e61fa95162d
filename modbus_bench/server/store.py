"""In-memory coil and register store for the Modbus slave.

The store owns four sparse address maps (coils, discrete inputs, holding
registers, input registers) and a subscriber list per map. It is the only
component that mutates slave state.

Example:
    >>> store = ModbusStore.from_dump(Dump(coils=[Coil(10, False)]))
    >>> store.subscribe_coils(lambda change: print(change))
    >>> store.set_coil(10, True)
    CoilChange(address=10, old=False, new=True)
    >>> store.get_coil(10)
    True
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Tuple, Union

from .errors import AddressNotFound, IllegalValue

MAX_ADDRESS = 0xFFFF
MAX_REGISTER_VALUE = 0xFFFF


class Table(Enum):
    """Addressable Modbus tables: (name, singular, holds bits)."""

    COILS = ("coils", "coil", True)
    DISCRETE_INPUTS = ("discrete_inputs", "discrete input", True)
    HOLDING_REGISTERS = ("holding_registers", "holding register", False)
    INPUT_REGISTERS = ("input_registers", "input register", False)

    def __init__(self, key: str, singular: str, is_bit: bool):
        self.key = key
        self.singular = singular
        self.is_bit = is_bit

    @classmethod
    def from_key(cls, key: str) -> 'Table':
        for table in cls:
            if table.key == key:
                return table
        raise ValueError(f"Unknown table: {key}")

    def __str__(self) -> str:
        return self.singular


@dataclass(frozen=True)
class Coil:
    address: int
    value: bool


@dataclass(frozen=True)
class Register:
    address: int
    value: int


@dataclass(frozen=True)
class CoilChange:
    address: int
    old: bool
    new: bool


@dataclass(frozen=True)
class RegisterChange:
    address: int
    old: int
    new: int


CoilSubscriber = Callable[[CoilChange], None]
RegisterSubscriber = Callable[[RegisterChange], None]
Change = Union[CoilChange, RegisterChange]


@dataclass
class Dump:
    """Seed for the store: one list of entries per table."""
    coils: List[Coil] = field(default_factory=list)
    discrete_inputs: List[Coil] = field(default_factory=list)
    holding_registers: List[Register] = field(default_factory=list)
    input_registers: List[Register] = field(default_factory=list)

    def entries(self, table: Table) -> list:
        return getattr(self, table.key)


class ModbusStore:
    """Thread-safe sparse store with synchronous change notification.

    Each table has its own re-entrant lock. Subscribers of a table are
    called in registration order while that lock is held, so they must be
    fast and must not call back into the store.
    """

    def __init__(self, dump: Dump = None):
        """Initialize store from a seed.

        Args:
            dump: Initial addresses and values. Addresses not in the dump
                never exist.

        Raises:
            ValueError: If a table in the dump repeats an address
        """
        dump = dump or Dump()
        self._values: Dict[Table, Dict[int, Union[bool, int]]] = {}
        self._locks: Dict[Table, threading.RLock] = {}
        self._subscribers: Dict[Table, List[Callable[[Change], None]]] = {}

        for table in Table:
            values = {}
            for entry in dump.entries(table):
                if entry.address in values:
                    raise ValueError(f"Duplicate {table} address {entry.address} in seed")
                values[entry.address] = self._check_value(table, entry.value)
            self._values[table] = values
            self._locks[table] = threading.RLock()
            self._subscribers[table] = []

    @classmethod
    def from_dump(cls, dump: Dump) -> 'ModbusStore':
        return cls(dump)

    # Locking and inspection

    def lock(self, table: Table) -> threading.RLock:
        """Return the lock serialising access to a table.

        Holding it across several get/set calls makes them atomic with
        respect to other callers of the same table.
        """
        return self._locks[table]

    def addresses(self, table: Table) -> List[int]:
        with self._locks[table]:
            return sorted(self._values[table])

    def snapshot(self, table: Table) -> List[Tuple[int, Union[bool, int]]]:
        """Sorted (address, value) pairs of a table."""
        with self._locks[table]:
            return sorted(self._values[table].items())

    # Generic access

    def get(self, table: Table, address: int) -> Union[bool, int]:
        with self._locks[table]:
            try:
                return self._values[table][address]
            except KeyError:
                raise AddressNotFound(table, address) from None

    def set(self, table: Table, address: int, value: Union[bool, int]) -> None:
        with self._locks[table]:
            values = self._values[table]
            if address not in values:
                raise AddressNotFound(table, address)
            value = self._check_value(table, value)

            old = values[address]
            if old == value:
                return
            values[address] = value

            change_type = CoilChange if table.is_bit else RegisterChange
            change = change_type(address=address, old=old, new=value)
            for callback in self._subscribers[table]:
                callback(change)

    def subscribe(self, table: Table, callback: Callable[[Change], None]) -> None:
        with self._locks[table]:
            self._subscribers[table].append(callback)

    # Coils

    def get_coil(self, address: int) -> bool:
        return self.get(Table.COILS, address)

    def set_coil(self, address: int, value: bool) -> None:
        self.set(Table.COILS, address, value)

    def subscribe_coils(self, callback: CoilSubscriber) -> None:
        self.subscribe(Table.COILS, callback)

    # Discrete inputs

    def get_discrete_input(self, address: int) -> bool:
        return self.get(Table.DISCRETE_INPUTS, address)

    def set_discrete_input(self, address: int, value: bool) -> None:
        self.set(Table.DISCRETE_INPUTS, address, value)

    def subscribe_discrete_inputs(self, callback: CoilSubscriber) -> None:
        self.subscribe(Table.DISCRETE_INPUTS, callback)

    # Holding registers

    def get_holding_register(self, address: int) -> int:
        return self.get(Table.HOLDING_REGISTERS, address)

    def set_holding_register(self, address: int, value: int) -> None:
        self.set(Table.HOLDING_REGISTERS, address, value)

    def subscribe_holding_registers(self, callback: RegisterSubscriber) -> None:
        self.subscribe(Table.HOLDING_REGISTERS, callback)

    # Input registers

    def get_input_register(self, address: int) -> int:
        return self.get(Table.INPUT_REGISTERS, address)

    def set_input_register(self, address: int, value: int) -> None:
        self.set(Table.INPUT_REGISTERS, address, value)

    def subscribe_input_registers(self, callback: RegisterSubscriber) -> None:
        self.subscribe(Table.INPUT_REGISTERS, callback)

    @staticmethod
    def _check_value(table: Table, value):
        if table.is_bit:
            if not isinstance(value, bool):
                raise IllegalValue(f"{table} value must be a bool, got {value!r}")
            return value

        if isinstance(value, bool) or not isinstance(value, int):
            raise IllegalValue(f"{table} value must be an integer, got {value!r}")
        if not 0 <= value <= MAX_REGISTER_VALUE:
            raise IllegalValue(f"{table} value {value} outside 0..{MAX_REGISTER_VALUE}")
        return value
