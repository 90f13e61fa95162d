"""pymodbus server bridge.

pymodbus owns the wire side: it accepts connections, decodes PDUs and
encodes responses. It reads and writes slave data through a device
context; PipelineDeviceContext implements that context on top of the
request pipeline, so every request pymodbus decodes goes through
Fallback -> Validation -> Adapter -> Handler -> Store.
"""

import asyncio
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from pymodbus import FramerType
from pymodbus.datastore import ModbusDeviceContext, ModbusServerContext
from pymodbus.server import ServerAsyncStop, StartAsyncSerialServer, StartAsyncTcpServer

from ..config import ServerConfig
from .errors import IllegalValue, ServerError
from .requests import (
    CoilsRequest,
    DiscreteInputsRequest,
    HoldingRegistersRequest,
    InputRegistersRequest,
    RequestHandler,
    Response,
)

# Function codes
READ_COILS = 0x01
READ_DISCRETE_INPUTS = 0x02
READ_HOLDING_REGISTERS = 0x03
READ_INPUT_REGISTERS = 0x04
WRITE_SINGLE_COIL = 0x05
WRITE_SINGLE_REGISTER = 0x06
WRITE_MULTIPLE_COILS = 0x0F
WRITE_MULTIPLE_REGISTERS = 0x10

COIL_CODES = (READ_COILS, WRITE_SINGLE_COIL, WRITE_MULTIPLE_COILS)
HOLDING_CODES = (READ_HOLDING_REGISTERS, WRITE_SINGLE_REGISTER, WRITE_MULTIPLE_REGISTERS)


class PipelineDeviceContext(ModbusDeviceContext):
    """Device context answering pymodbus from the request pipeline."""

    def __init__(self, pipeline: RequestHandler, unit_id: int):
        super().__init__()
        self.pipeline = pipeline
        self.unit_id = unit_id

    def validate(self, func_code, address, count=1):
        # Address checks belong to the store
        return True

    def getValues(self, func_code, address, count=1):
        """Serve a read; write codes read back the same table.

        Errors are raised, pymodbus answers them with device failure.
        """
        if func_code in COIL_CODES:
            response = self.pipeline.handle_coils(CoilsRequest(self.unit_id, address, count))
        elif func_code == READ_DISCRETE_INPUTS:
            response = self.pipeline.handle_discrete_inputs(DiscreteInputsRequest(self.unit_id, address, count))
        elif func_code in HOLDING_CODES:
            response = self.pipeline.handle_holding_registers(HoldingRegistersRequest(self.unit_id, address, count))
        elif func_code == READ_INPUT_REGISTERS:
            response = self.pipeline.handle_input_registers(InputRegistersRequest(self.unit_id, address, count))
        else:
            raise IllegalValue(f"unsupported function code 0x{func_code:02X}")
        return self._unwrap(response)

    def setValues(self, func_code, address, values):
        """Serve a write.

        Returns the Modbus exception code of a failed write, which pymodbus
        sends back as an exception response. None on success.
        """
        if not isinstance(values, list):
            values = [values]

        if func_code in COIL_CODES:
            request = CoilsRequest(
                self.unit_id, address, len(values), is_write=True, args=[bool(v) for v in values]
            )
            response = self.pipeline.handle_coils(request)
        elif func_code in HOLDING_CODES:
            request = HoldingRegistersRequest(
                self.unit_id, address, len(values), is_write=True, args=[int(v) for v in values]
            )
            response = self.pipeline.handle_holding_registers(request)
        else:
            return IllegalValue.exception_code
        if response.is_error():
            return response.error.exception_code
        return None

    @staticmethod
    def _unwrap(response: Response) -> list:
        if response.is_error():
            raise response.error
        return response.values


class PipelineServerContext(ModbusServerContext):
    """Server context that hands every unit id to the pipeline.

    Unit id checks are left to the validation stage instead of pymodbus.
    """

    def __init__(self, pipeline: RequestHandler, unit_id: int = 1):
        super().__init__(devices=PipelineDeviceContext(pipeline, unit_id), single=True)
        self.pipeline = pipeline
        self.unit_id = unit_id

    def __contains__(self, device_id) -> bool:
        return True

    def __getitem__(self, device_id) -> PipelineDeviceContext:
        return PipelineDeviceContext(self.pipeline, device_id)

    def device_ids(self) -> list:
        return [self.unit_id]


class ServerManager:
    """Runs the pymodbus async server on a background thread."""

    def __init__(self, config: ServerConfig, pipeline: RequestHandler, log_manager):
        """Initialize server manager.

        Args:
            config: Server settings (transport, address, unit id)
            pipeline: Request pipeline answering all requests
            log_manager: LogManager instance
        """
        self.config = config
        self.pipeline = pipeline
        self.log_manager = log_manager
        self.context = PipelineServerContext(pipeline, unit_id=config.unit_id)

        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._ready = threading.Event()
        self._error: Optional[BaseException] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def describe(self) -> str:
        if self.config.transport == "rtu":
            return f"rtu://{self.config.serial_port}@{self.config.baudrate}"
        return f"tcp://{self.config.host}:{self.config.port}"

    def start(self) -> None:
        """Start serving in the background.

        Raises:
            ServerError: If already running, the transport is unknown, or
                the server did not come up within startup_timeout
        """
        if self.is_running:
            raise ServerError("server already running")
        if self.config.transport not in ("tcp", "rtu"):
            raise ServerError(f"unknown transport: {self.config.transport}")

        self._ready.clear()
        self._error = None
        self._thread = threading.Thread(target=self._run, daemon=True, name="ModbusServer")
        self._thread.start()

        if not self._ready.wait(timeout=self.config.startup_timeout):
            raise ServerError("server startup timeout")
        if self._error is not None:
            raise ServerError(f"start server: {self._error}") from self._error

        self.log_manager.info(f"Modbus server listening on {self.describe()}")

    def stop(self) -> None:
        """Stop the server and wait for its thread.

        Raises:
            ServerError: If the server is not running
        """
        if not self.is_running or self._loop is None:
            raise ServerError("server not running")

        future = asyncio.run_coroutine_threadsafe(ServerAsyncStop(), self._loop)
        try:
            future.result(timeout=self.config.shutdown_timeout)
        except (FutureTimeoutError, RuntimeError) as e:
            raise ServerError(f"stop server: {e}") from e

        self._thread.join(timeout=self.config.shutdown_timeout)
        if self._thread.is_alive():
            raise ServerError("server thread did not terminate")

        self._thread = None
        self.log_manager.info("Modbus server stopped")

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        try:
            loop.run_until_complete(self._serve())
        except Exception as e:
            self._error = e
            self.log_manager.error(f"Modbus server error: {e}")
        finally:
            self._ready.set()
            loop.close()
            self._loop = None

    async def _serve(self) -> None:
        # pymodbus only returns from Start*Server once the server is stopped
        asyncio.get_running_loop().call_later(0.1, self._ready.set)
        if self.config.transport == "rtu":
            await StartAsyncSerialServer(
                context=self.context,
                framer=FramerType.RTU,
                port=self.config.serial_port,
                baudrate=self.config.baudrate,
            )
        else:
            await StartAsyncTcpServer(
                context=self.context,
                address=(self.config.host, self.config.port),
            )
