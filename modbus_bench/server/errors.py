"""Error taxonomy for the slave request pipeline."""

# Modbus exception codes
ILLEGAL_FUNCTION = 0x01
ILLEGAL_DATA_ADDRESS = 0x02
ILLEGAL_DATA_VALUE = 0x03


class ModbusError(Exception):
    """Base class for errors reported back to the transport."""

    exception_code = ILLEGAL_FUNCTION


class AddressNotFound(ModbusError):
    """An address is absent from the table it was looked up in."""

    exception_code = ILLEGAL_DATA_ADDRESS

    def __init__(self, table, address: int):
        self.table = table
        self.address = address
        super().__init__(f"no such {table.singular} at address {address}")


class IllegalValue(ModbusError):
    """A value or request shape the store cannot accept."""

    exception_code = ILLEGAL_DATA_VALUE


class UnsupportedUnit(ModbusError):
    """Request addressed to a unit identifier this slave does not serve."""

    exception_code = ILLEGAL_FUNCTION

    def __init__(self, unit_id: int):
        self.unit_id = unit_id
        super().__init__(f"unsupported unit id {unit_id}")


class RangeAccessError(ModbusError):
    """A range operation failed at a specific address.

    The failing store error is available as ``__cause__``.
    """

    def __init__(self, address: int, operation: str, cause: ModbusError):
        self.address = address
        self.operation = operation
        self.exception_code = cause.exception_code
        super().__init__(f"{operation} at address {address}: {cause}")


class SeedError(Exception):
    """Seed file is missing, unreadable or malformed."""


class ServerError(Exception):
    """Server lifecycle misuse or failure."""
