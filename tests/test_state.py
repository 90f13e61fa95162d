"""Tests for modbus_bench/server/state.py"""

import threading

from modbus_bench.server.state import ServerState
from modbus_bench.server.store import Table


def test_attach_copies_store(store):
    state = ServerState()
    state.attach(store)

    snapshot = state.get_snapshot()
    assert snapshot['tables']['coils'] == [
        {'address': 10, 'value': False},
        {'address': 11, 'value': True},
        {'address': 12, 'value': False},
    ]
    assert snapshot['heartbeat'] == 0


def test_changes_are_mirrored(store):
    state = ServerState()
    state.attach(store)

    store.set_holding_register(44883, 99)
    store.set_holding_register(44883, 99)

    snapshot = state.get_snapshot()
    assert {'address': 44883, 'value': 99} in snapshot['tables']['holding_registers']
    assert snapshot['heartbeat'] == 1
    assert snapshot['recent_changes'] == [
        {'table': 'holding_registers', 'address': 44883, 'old': 0, 'new': 99}
    ]


def test_change_during_attach_reaches_mirror(store, monkeypatch):
    state = ServerState()
    snapshot = store.snapshot
    writers = []

    def snapshot_with_concurrent_write(table):
        contents = snapshot(table)
        if table is Table.HOLDING_REGISTERS:
            writer = threading.Thread(target=store.set_holding_register, args=(44883, 99))
            writer.start()
            writer.join(timeout=0.2)
            writers.append(writer)
        return contents

    monkeypatch.setattr(store, "snapshot", snapshot_with_concurrent_write)
    state.attach(store)
    for writer in writers:
        writer.join()

    assert {'address': 44883, 'value': 99} in state.get_snapshot()['tables']['holding_registers']
    assert state.get_snapshot()['heartbeat'] == 1


def test_recent_changes_bounded(store):
    state = ServerState(max_recent_changes=3)
    state.attach(store)

    for value in range(1, 6):
        store.set_input_register(30023, value)

    changes = state.get_snapshot()['recent_changes']
    assert [c['new'] for c in changes] == [3, 4, 5]


def test_set_status():
    state = ServerState()
    state.set_status(server_running=True)
    state.set_status(simulation_running=True)
    state.set_status(server_running=False)

    snapshot = state.get_snapshot()
    assert snapshot['server_running'] is False
    assert snapshot['simulation_running'] is True
