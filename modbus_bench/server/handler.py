"""Range operations over the store, one per Modbus function code."""

from typing import List

from .errors import ModbusError, RangeAccessError
from .store import ModbusStore, Table


class ModbusHandler:
    """Translate address + count into per-address store calls.

    Reads return the whole range or raise; a failed read never returns a
    partial list. Multi-writes are applied in ascending address order and
    are not rolled back: when a write fails at some offset, the addresses
    before it keep their new values.
    """

    def __init__(self, store: ModbusStore, log_manager=None):
        """Initialize handler.

        Args:
            store: Store holding the slave tables
            log_manager: LogManager for per-call debug/error events (optional)
        """
        self.store = store
        self.log_manager = log_manager

    def read_coils(self, address: int, count: int) -> List[bool]:
        """Function 0x01."""
        return self._read_range(Table.COILS, "0x01 (read coils)", address, count)

    def read_discrete_inputs(self, address: int, count: int) -> List[bool]:
        """Function 0x02."""
        return self._read_range(Table.DISCRETE_INPUTS, "0x02 (read discrete inputs)", address, count)

    def read_holding_registers(self, address: int, count: int) -> List[int]:
        """Function 0x03."""
        return self._read_range(Table.HOLDING_REGISTERS, "0x03 (read holding registers)", address, count)

    def read_input_registers(self, address: int, count: int) -> List[int]:
        """Function 0x04."""
        return self._read_range(Table.INPUT_REGISTERS, "0x04 (read input registers)", address, count)

    def write_single_coil(self, address: int, value: bool) -> None:
        """Function 0x05. Store errors propagate unchanged."""
        self._write_single(Table.COILS, "0x05 (write single coil)", address, value)

    def write_single_register(self, address: int, value: int) -> None:
        """Function 0x06. Store errors propagate unchanged."""
        self._write_single(Table.HOLDING_REGISTERS, "0x06 (write single register)", address, value)

    def write_multiple_coils(self, address: int, values: List[bool]) -> None:
        """Function 0x0F."""
        self._write_range(Table.COILS, "0x0F (write multiple coils)", address, values)

    def write_multiple_registers(self, address: int, values: List[int]) -> None:
        """Function 0x10."""
        self._write_range(Table.HOLDING_REGISTERS, "0x10 (write multiple registers)", address, values)

    def _read_range(self, table: Table, function: str, address: int, count: int) -> list:
        self._log("debug", f"Call function {function}, addr: {address}, cnt: {count}")

        result = []
        with self.store.lock(table):
            for addr in range(address, address + count):
                try:
                    result.append(self.store.get(table, addr))
                except ModbusError as e:
                    self._log("error", f"Could not get {table} at addr: {addr}, reason: {e}")
                    raise RangeAccessError(addr, f"get {table}", e) from e

        self._log("debug", f"Read {count} {table.key} at addr: {address}")
        return result

    def _write_single(self, table: Table, function: str, address: int, value) -> None:
        self._log("debug", f"Call function {function}, addr: {address}, value: {value}")
        try:
            self.store.set(table, address, value)
        except ModbusError as e:
            self._log("error", f"Could not write {table} at addr: {address}, reason: {e}")
            raise

        self._log("debug", f"Written {value} to {table} at addr: {address}")

    def _write_range(self, table: Table, function: str, address: int, values: list) -> None:
        self._log("debug", f"Call function {function}, addr: {address}, values: {values}")

        with self.store.lock(table):
            for offset, value in enumerate(values):
                addr = address + offset
                try:
                    self.store.set(table, addr, value)
                except ModbusError as e:
                    self._log("error", f"Could not write {table} at addr: {addr}, reason: {e}")
                    raise RangeAccessError(addr, f"set {table}", e) from e

        self._log("debug", f"Written {values} to {table.key} at addr: {address}")

    def _log(self, level: str, message: str) -> None:
        if self.log_manager:
            self.log_manager.log_event(level, message)
