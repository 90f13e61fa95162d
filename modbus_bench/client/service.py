"""Master-side Modbus operations with bounded retry."""

from typing import Callable, List

from .errors import ClientError, ModbusRequestError
from .manager import ClientManager

DEFAULT_RETRIES = 2


class ModbusService:
    """The eight supported function codes, retried over a reconnect.

    Each operation is attempted up to ``retries + 1`` times. After a
    failed attempt the connection is rebuilt through the manager before
    the next one; once attempts run out the last error is raised as
    ModbusRequestError.
    """

    def __init__(self, manager: ClientManager, log_manager, unit_id: int = 1,
                 retries: int = DEFAULT_RETRIES):
        self.manager = manager
        self.log_manager = log_manager
        self.unit_id = unit_id
        self.retries = retries

    def read_coils(self, address: int, count: int) -> List[bool]:
        response = self._with_retry(
            f"reading {count} coils at 0x{address:X}",
            lambda client: client.read_coils(address, count=count, device_id=self.unit_id),
        )
        return list(response.bits[:count])

    def read_discrete_inputs(self, address: int, count: int) -> List[bool]:
        response = self._with_retry(
            f"reading {count} discrete inputs at 0x{address:X}",
            lambda client: client.read_discrete_inputs(address, count=count, device_id=self.unit_id),
        )
        return list(response.bits[:count])

    def read_holding_registers(self, address: int, count: int) -> List[int]:
        response = self._with_retry(
            f"reading {count} holding registers at 0x{address:X}",
            lambda client: client.read_holding_registers(address, count=count, device_id=self.unit_id),
        )
        return list(response.registers[:count])

    def read_input_registers(self, address: int, count: int) -> List[int]:
        response = self._with_retry(
            f"reading {count} input registers at 0x{address:X}",
            lambda client: client.read_input_registers(address, count=count, device_id=self.unit_id),
        )
        return list(response.registers[:count])

    def write_single_coil(self, address: int, value: bool) -> None:
        self._with_retry(
            f"writing coil at 0x{address:X}",
            lambda client: client.write_coil(address, value, device_id=self.unit_id),
        )

    def write_single_register(self, address: int, value: int) -> None:
        self._with_retry(
            f"writing holding register at 0x{address:X}",
            lambda client: client.write_register(address, value, device_id=self.unit_id),
        )

    def write_multiple_coils(self, address: int, values: List[bool]) -> None:
        self._with_retry(
            f"writing {len(values)} coils at 0x{address:X}",
            lambda client: client.write_coils(address, values, device_id=self.unit_id),
        )

    def write_multiple_registers(self, address: int, values: List[int]) -> None:
        self._with_retry(
            f"writing {len(values)} holding registers at 0x{address:X}",
            lambda client: client.write_registers(address, values, device_id=self.unit_id),
        )

    def _with_retry(self, what: str, call: Callable):
        error = None
        for attempt in range(self.retries + 1):
            try:
                return self._attempt(what, call)
            except ModbusRequestError as e:
                error = e

            attempts_left = self.retries - attempt
            self.log_manager.warning(f"Failed {what}: {error}, attempts left: {attempts_left}")
            if attempts_left > 0:
                try:
                    self.manager.reconnect()
                except ClientError as e:
                    self.log_manager.error(f"Reconnect failed: {e}")

        raise error

    def _attempt(self, what: str, call: Callable):
        try:
            client = self.manager.get_client()
        except ClientError as e:
            raise ModbusRequestError(f"get client: {e}") from e

        response = call(client)
        if response is None:
            raise ModbusRequestError(f"{what}: no response")
        if response.isError():
            code = _exception_code(response)
            raise ModbusRequestError(f"{what}: exception response (code {code})", exception_code=code)
        return response


def _exception_code(response):
    """Exception code of a pymodbus or in-process error response."""
    code = getattr(response, 'exception_code', None)
    if code is None and getattr(response, 'error', None) is not None:
        code = response.error.exception_code
    return code
