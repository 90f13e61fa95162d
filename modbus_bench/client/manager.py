"""Connection management for the master side."""

from typing import Optional

from ..config import ClientConfig
from .errors import ClientError, NoClient, NotConnected
from .factory import create_modbus_client
from .interface import ModbusInterface

DEFAULT_TRANSPORT = "tcp"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5502


class ClientManager:
    """Owns the current client and the parameters it was connected with.

    Parameters are remembered after the first connect() so reconnect()
    can rebuild the connection without being told where to go again.
    """

    def __init__(self, config: ClientConfig, log_manager, mock_pipeline=None):
        """Initialize client manager.

        Args:
            config: Client settings (serial line, timeout)
            log_manager: LogManager instance
            mock_pipeline: Slave pipeline; when given, clients are mocks
                answering from it instead of real connections
        """
        self.config = config
        self.log_manager = log_manager
        self.mock_pipeline = mock_pipeline

        self.transport: Optional[str] = None
        self.host: Optional[str] = None
        self.port: Optional[int] = None

        self._client: Optional[ModbusInterface] = None
        self._connected = False

    def set_params(self, transport: str, host: str, port: int) -> None:
        self.transport = transport
        self.host = host
        self.port = port

    def connect(self, transport: Optional[str] = None, host: Optional[str] = None,
                port: Optional[int] = None) -> None:
        """Connect with the given parameters, or the remembered ones.

        Raises:
            ClientError: If a parameter was never set or the connection
                could not be established
        """
        if transport is not None:
            self.transport = transport
        if host is not None:
            self.host = host
        if port is not None:
            self.port = port

        self._client = None
        self._connected = False

        if self.transport is None:
            raise ClientError("transport unknown")
        if self.host is None:
            raise ClientError("address unknown")
        if self.port is None:
            raise ClientError("port unknown")

        try:
            client = create_modbus_client(
                transport=self.transport,
                host=self.host,
                port=self.port,
                mock=self.mock_pipeline is not None,
                pipeline=self.mock_pipeline,
                serial_port=self.config.serial_port,
                baudrate=self.config.baudrate,
                timeout=self.config.timeout,
            )
        except ValueError as e:
            self.log_manager.error(f"Client not created: {e}")
            raise ClientError(f"create client: {e}") from e

        self._client = client
        if not client.connect():
            self.log_manager.error(f"Connection to {self.describe()} is not established")
            raise ClientError(f"connect to {self.describe()}: connection refused")

        self.log_manager.info(f"Connection to {self.describe()} established")
        self._connected = True

    def connect_default(self) -> None:
        """Connect, filling unset parameters from the defaults."""
        self.connect(
            self.transport or DEFAULT_TRANSPORT,
            self.host or DEFAULT_HOST,
            self.port or DEFAULT_PORT,
        )

    def reconnect(self) -> None:
        self.disconnect()
        self.connect()

    def disconnect(self) -> None:
        """Close the current connection, if any. Never raises."""
        if self._client is not None:
            self._client.close()
            self.log_manager.info(f"Disconnected from {self.describe()}")
        self._client = None
        self._connected = False

    def get_client(self) -> ModbusInterface:
        """Return the connected client.

        Raises:
            NoClient: If no client has been created
            NotConnected: If the connection is not established
        """
        if self._client is None:
            raise NoClient()
        if not self._connected or not self._client.is_connected():
            raise NotConnected()
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._connected

    def describe(self) -> str:
        if self.transport == "rtu":
            return f"rtu://{self.config.serial_port}@{self.config.baudrate}"
        return f"{self.transport}://{self.host}:{self.port}"
