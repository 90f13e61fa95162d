"""Load the initial store contents from a JSON seed file.

Seed format::

    {
        "coils": {"10": true, "11": false},
        "discrete_inputs": {"10071": false},
        "holding_registers": {"44883": 0},
        "input_registers": {"30022": 512}
    }

Every table key is required; an empty object is allowed.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from .errors import SeedError
from .store import MAX_ADDRESS, MAX_REGISTER_VALUE, Coil, Dump, Register, Table


def read_seed(filename: Union[str, Path]) -> Dump:
    """Read a seed file.

    Args:
        filename: Path to the JSON seed

    Returns:
        Dump with one list of entries per table

    Raises:
        SeedError: If the file cannot be read or is malformed
    """
    try:
        with open(filename, 'r') as f:
            seed = json.load(f)
    except OSError as e:
        raise SeedError(f"read seed file {filename}: {e}") from e
    except json.JSONDecodeError as e:
        raise SeedError(f"parse seed file {filename}: {e}") from e

    return parse_seed(seed)


def parse_seed(seed: Dict[str, Any]) -> Dump:
    """Build a Dump from an already decoded seed object."""
    if not isinstance(seed, dict):
        raise SeedError("seed must be a JSON object")

    tables = {}
    for table in Table:
        if table.key not in seed:
            raise SeedError(f"seed has no '{table.key}' object")
        tables[table.key] = _parse_table(table, seed[table.key])

    return Dump(**tables)


def _parse_table(table: Table, obj: Any) -> List[Union[Coil, Register]]:
    if not isinstance(obj, dict):
        raise SeedError(f"'{table.key}' must be an object, got {type(obj).__name__}")

    entries = {}
    for key, value in obj.items():
        try:
            address = int(key)
        except ValueError:
            raise SeedError(f"'{table.key}': address {key!r} is not an integer") from None

        if not 0 <= address <= MAX_ADDRESS:
            raise SeedError(f"'{table.key}': address {address} outside 0..{MAX_ADDRESS}")
        if address in entries:
            raise SeedError(f"'{table.key}': address {address} appears twice")

        if table.is_bit:
            if not isinstance(value, bool):
                raise SeedError(f"'{table.key}': value at {address} must be true/false, got {value!r}")
            entries[address] = Coil(address=address, value=value)
        else:
            if isinstance(value, bool) or not isinstance(value, int):
                raise SeedError(f"'{table.key}': value at {address} must be an integer, got {value!r}")
            if not 0 <= value <= MAX_REGISTER_VALUE:
                raise SeedError(f"'{table.key}': value {value} at {address} outside 0..{MAX_REGISTER_VALUE}")
            entries[address] = Register(address=address, value=value)

    return [entries[address] for address in sorted(entries)]
