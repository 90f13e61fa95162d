"""Tests for modbus_bench/server/seed.py"""

import json
from pathlib import Path

import pytest

from modbus_bench.server.errors import SeedError
from modbus_bench.server.seed import parse_seed, read_seed
from modbus_bench.server.store import Coil, Register

REPO_SEED = Path(__file__).resolve().parent.parent / "seed.json"


def make_seed(**overrides):
    seed = {
        "coils": {"10": True, "11": False},
        "discrete_inputs": {"10071": False},
        "holding_registers": {"44883": 0},
        "input_registers": {"30022": 512},
    }
    seed.update(overrides)
    return seed


@pytest.fixture
def seed_file(tmp_path):
    def _write(content):
        path = tmp_path / "seed.json"
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return path
    return _write


def test_read_seed(seed_file):
    dump = read_seed(seed_file(make_seed()))

    assert dump.coils == [Coil(10, True), Coil(11, False)]
    assert dump.discrete_inputs == [Coil(10071, False)]
    assert dump.holding_registers == [Register(44883, 0)]
    assert dump.input_registers == [Register(30022, 512)]


def test_entries_sorted_by_address():
    dump = parse_seed(make_seed(holding_registers={"9": 1, "2": 2, "100": 3}))
    assert [r.address for r in dump.holding_registers] == [2, 9, 100]


def test_empty_tables_allowed():
    dump = parse_seed(make_seed(coils={}, input_registers={}))
    assert dump.coils == []
    assert dump.input_registers == []


def test_repository_seed_is_valid():
    dump = read_seed(REPO_SEED)
    assert dump.coils


@pytest.mark.parametrize("missing", ["coils", "discrete_inputs", "holding_registers", "input_registers"])
def test_missing_table_key(missing):
    seed = make_seed()
    del seed[missing]
    with pytest.raises(SeedError, match=missing):
        parse_seed(seed)


@pytest.mark.parametrize("overrides", [
    {"coils": {"10": 1}},
    {"discrete_inputs": {"1": "true"}},
    {"holding_registers": {"1": True}},
    {"holding_registers": {"1": 1.5}},
    {"input_registers": {"1": 65536}},
    {"input_registers": {"1": -1}},
    {"coils": {"abc": True}},
    {"coils": {"65536": True}},
    {"coils": {"-1": True}},
    {"coils": [True, False]},
])
def test_malformed_tables_rejected(overrides):
    with pytest.raises(SeedError):
        parse_seed(make_seed(**overrides))


def test_duplicate_address_spellings_rejected():
    with pytest.raises(SeedError, match="twice"):
        parse_seed(make_seed(coils={"10": True, "010": False}))


def test_top_level_must_be_object():
    with pytest.raises(SeedError):
        parse_seed([])


def test_invalid_json_chains_cause(seed_file):
    with pytest.raises(SeedError) as exc_info:
        read_seed(seed_file("{not json"))
    assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)


def test_missing_file_chains_cause(tmp_path):
    with pytest.raises(SeedError) as exc_info:
        read_seed(tmp_path / "nope.json")
    assert isinstance(exc_info.value.__cause__, OSError)
