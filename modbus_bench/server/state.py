"""Thread-safe mirror of the store for the UIs.

Store subscribers run on the thread that serviced the Modbus request, while
holding the table lock. The UIs therefore never render from inside a
subscriber: ServerState copies each change into its own mirror and the
TUI/web dashboard poll get_snapshot() on their own schedule.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .store import ModbusStore, Table


@dataclass
class ServerState:
    """State shared between request threads and the UI thread."""

    tables: Dict[str, Dict[int, Any]] = field(default_factory=dict)

    # System status
    server_running: bool = False
    simulation_running: bool = False

    # Incremented on every change notification
    heartbeat: int = 0

    # Last changes, newest last
    recent_changes: List[Dict[str, Any]] = field(default_factory=list)
    max_recent_changes: int = 50

    lock: threading.Lock = field(default_factory=threading.Lock)

    def attach(self, store: ModbusStore) -> None:
        """Copy the current store contents and subscribe to all four tables.

        Each table is copied and subscribed under its store lock, so no
        change falls between the copy and the first notification.
        """
        for table in Table:
            with store.lock(table):
                contents = dict(store.snapshot(table))
                with self.lock:
                    self.tables[table.key] = contents
                store.subscribe(table, self._make_subscriber(table))

    def _make_subscriber(self, table: Table):
        def on_change(change) -> None:
            with self.lock:
                self.tables.setdefault(table.key, {})[change.address] = change.new
                self.heartbeat += 1
                self.recent_changes.append({
                    'table': table.key,
                    'address': change.address,
                    'old': change.old,
                    'new': change.new,
                })
                del self.recent_changes[:-self.max_recent_changes]
        return on_change

    def set_status(self, server_running: bool = None, simulation_running: bool = None) -> None:
        with self.lock:
            if server_running is not None:
                self.server_running = server_running
            if simulation_running is not None:
                self.simulation_running = simulation_running

    def get_snapshot(self) -> dict:
        """Get a thread-safe, JSON-friendly snapshot of all state."""
        with self.lock:
            return {
                'tables': {
                    key: [{'address': address, 'value': value} for address, value in sorted(values.items())]
                    for key, values in self.tables.items()
                },
                'server_running': self.server_running,
                'simulation_running': self.simulation_running,
                'heartbeat': self.heartbeat,
                'recent_changes': list(self.recent_changes),
            }
