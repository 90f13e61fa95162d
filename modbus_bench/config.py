"""Configuration settings for the Modbus slave and master."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """Slave (server) settings."""
    transport: str = "tcp"  # "tcp" or "rtu"
    host: str = "localhost"
    port: int = 5502
    serial_port: str = "/dev/ttyUSB0"  # rtu only
    baudrate: int = 19200  # rtu only
    unit_id: int = 1
    seed_file: str = "seed.json"
    startup_timeout: float = 5.0
    shutdown_timeout: float = 3.0


@dataclass
class ClientConfig:
    """Master (client) settings."""
    transport: str = "tcp"
    host: str = "localhost"
    port: int = 5502
    serial_port: str = "/dev/ttyUSB0"
    baudrate: int = 19200
    unit_id: int = 1
    timeout: float = 3.0
    retries: int = 2  # Extra attempts after the first one, with a reconnect before each


@dataclass
class SystemConfig:
    """Logging and simulation settings."""
    log_stack_size: int = 3000
    log_file: str = "logs/server_events.jsonl"
    simulation_interval: float = 2.0
    debug: bool = False


@dataclass
class TUIConfig:
    """Terminal UI update rates."""
    poll_rate: float = 0.25
    log_refresh_rate: float = 1.0


@dataclass
class AppConfig:
    """Complete application configuration."""
    server: ServerConfig
    client: ClientConfig
    system: SystemConfig
    tui: TUIConfig

    @classmethod
    def create_default(cls, debug: Optional[bool] = None) -> 'AppConfig':
        """Create default configuration.

        Args:
            debug: Record debug events; defaults to the DEBUG environment variable

        Returns:
            AppConfig instance with default settings
        """
        if debug is None:
            debug = os.environ.get('DEBUG', '0') == '1'
        return cls(
            server=ServerConfig(),
            client=ClientConfig(),
            system=SystemConfig(debug=debug),
            tui=TUIConfig(),
        )
