"""Background activity simulator for the slave.

Randomizes the seeded discrete inputs and input registers on a fixed
interval, the way field sensors would, so connected masters and the UIs
see live data.
"""

import random
import threading
import time
from typing import Optional

from ..util import TimeoutLock
from .errors import ModbusError
from .store import ModbusStore, Table

# Ticks between log file rotation checks
ROTATION_TICKS = 100

# Longest a tick waits for the uptime lock before skipping the update
UPTIME_LOCK_TIMEOUT = 1.0


class ActivitySimulator(threading.Thread):
    """Thread that writes random values into the read-only tables.

    Writes go through the store setters, so subscribers are notified like
    for any other change.
    """

    def __init__(
        self,
        store: ModbusStore,
        log_manager,
        interval: float = 2.0,
        rng: Optional[random.Random] = None,
    ):
        """Initialize simulator.

        Args:
            store: Store to update
            log_manager: LogManager instance
            interval: Seconds between randomization rounds
            rng: Random source (for reproducible runs)
        """
        super().__init__(daemon=True, name="ActivitySimulator")
        self.store = store
        self.log_manager = log_manager
        self.interval = interval
        self.rng = rng or random.Random()
        self._stop_event = threading.Event()
        self._uptime_lock = TimeoutLock()
        self._started_at: Optional[float] = None
        self._uptime = 0
        self._rotation_counter = 0

    def stop(self) -> None:
        """Signal the thread to stop."""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        return self.is_alive() and not self._stop_event.is_set()

    def uptime(self) -> int:
        """Whole seconds the simulation has been running."""
        with self._uptime_lock:
            return self._uptime

    def run(self) -> None:
        self.log_manager.info("Activity simulation started")
        self._started_at = time.monotonic()

        while not self._stop_event.wait(self.interval):
            self.tick()

            self._rotation_counter += 1
            if self._rotation_counter >= ROTATION_TICKS:
                self.log_manager.rotate_log_file()
                self._rotation_counter = 0

        self.log_manager.info("Activity simulation stopped")

    def tick(self) -> None:
        """Run one randomization round."""
        self._update_uptime(time.monotonic() + UPTIME_LOCK_TIMEOUT)
        self.randomize_discrete_inputs()
        self.randomize_input_registers()

    def randomize_discrete_inputs(self) -> None:
        for address in self.store.addresses(Table.DISCRETE_INPUTS):
            value = self.rng.random() < 0.5
            self._set(Table.DISCRETE_INPUTS, address, value)
            self.log_manager.debug(f"Updating discrete input at 0x{address:X} to {value}")

    def randomize_input_registers(self) -> None:
        for address in self.store.addresses(Table.INPUT_REGISTERS):
            value = self.rng.randrange(0x10000)
            self._set(Table.INPUT_REGISTERS, address, value)
            self.log_manager.debug(f"Updating input register at 0x{address:X} to 0x{value:X}")

    def _set(self, table: Table, address: int, value) -> None:
        try:
            self.store.set(table, address, value)
        except ModbusError as e:
            self.log_manager.error_once(f"Simulation could not update {table} at {address}: {e}")

    def _update_uptime(self, deadline: float) -> None:
        if not self._uptime_lock.acquire_until(deadline):
            self.log_manager.debug("Uptime lock busy, skipping update")
            return
        try:
            if self._started_at is not None:
                self._uptime = max(self._uptime, int(time.monotonic() - self._started_at))
        finally:
            self._uptime_lock.release()
