"""Slave controller: wires store, pipeline, server and simulator together."""

from typing import Optional

from ..config import AppConfig
from .errors import ServerError
from .middleware import build_pipeline
from .simulator import ActivitySimulator
from .state import ServerState
from .store import Dump, ModbusStore
from .transport import ServerManager


class SlaveController:
    """Controller behind the slave UIs.

    Start/stop methods return True on success and log the outcome, so the
    TUI, web dashboard and headless mode can call them without handling
    exceptions themselves.
    """

    def __init__(self, config: AppConfig, seed: Dump, log_manager):
        """Initialize slave controller.

        Args:
            config: Application configuration
            seed: Initial store contents
            log_manager: LogManager instance
        """
        self.config = config
        self.seed = seed
        self.log_manager = log_manager

        self.store = ModbusStore.from_dump(seed)
        self.pipeline = build_pipeline(self.store, log_manager, unit_id=config.server.unit_id)
        self.server = ServerManager(config.server, self.pipeline, log_manager)

        self.state = ServerState()
        self.state.attach(self.store)

        self.simulator: Optional[ActivitySimulator] = None

    def start_server(self) -> bool:
        try:
            self.server.start()
        except ServerError as e:
            self.log_manager.error(f"Could not start server, reason: {e}")
            return False

        self.state.set_status(server_running=True)
        self.log_manager.info("Server started")
        return True

    def stop_server(self) -> bool:
        try:
            self.server.stop()
        except ServerError as e:
            self.log_manager.error(f"Could not stop server, reason: {e}")
            return False

        self.state.set_status(server_running=False)
        self.log_manager.info("Server stopped")
        return True

    def start_simulation(self) -> bool:
        if self.simulator and self.simulator.is_running:
            self.log_manager.warning("Simulation already running")
            return False

        # Let a new run report store errors again
        self.log_manager.clear_logged_once()
        self.simulator = ActivitySimulator(
            self.store,
            self.log_manager,
            interval=self.config.system.simulation_interval,
        )
        self.simulator.start()
        self.state.set_status(simulation_running=True)
        return True

    def stop_simulation(self) -> bool:
        if not self.simulator or not self.simulator.is_running:
            self.log_manager.warning("Simulation not running")
            return False

        self.simulator.stop()
        self.simulator.join(timeout=self.config.system.simulation_interval + 1.0)
        self.state.set_status(simulation_running=False)
        return True

    def shutdown(self) -> None:
        """Stop whatever is running."""
        if self.simulator and self.simulator.is_running:
            self.stop_simulation()
        if self.server.is_running:
            self.stop_server()
