"""Protocol-to-store routing layer."""

from .errors import IllegalValue, ModbusError
from .handler import ModbusHandler
from .requests import (
    CoilsRequest,
    DiscreteInputsRequest,
    HoldingRegistersRequest,
    InputRegistersRequest,
    RequestHandler,
    Response,
)

LOG_REQUEST_SEPARATOR = "=" * 80


class AdapterHandler(RequestHandler):
    """Classify each request into one handler call.

    Decision table, evaluated in order:
        is_write and quantity == 1  -> single write with args[0]
        is_write and quantity > 1   -> multiple write with args[:quantity]
        not is_write                -> read quantity elements at address

    Discrete inputs and input registers are read-only and always take the
    last branch. Errors raised by the handler are returned in the Response.
    """

    def __init__(self, handler: ModbusHandler, log_manager):
        self.handler = handler
        self.log_manager = log_manager

    def handle_coils(self, request: CoilsRequest) -> Response:
        self._log_request("coils", request, request.is_write, request.args)
        try:
            self._check_shape(request, request.is_write, request.args)
            if request.is_write and request.quantity == 1:
                self.handler.write_single_coil(request.address, request.args[0])
                return Response()

            if request.is_write:
                self.handler.write_multiple_coils(request.address, request.args[:request.quantity])
                return Response()

            return Response(values=self.handler.read_coils(request.address, request.quantity))
        except ModbusError as e:
            return self._failed("coils", e)

    def handle_discrete_inputs(self, request: DiscreteInputsRequest) -> Response:
        self._log_request("discrete_inputs", request)
        try:
            self._check_shape(request)
            return Response(values=self.handler.read_discrete_inputs(request.address, request.quantity))
        except ModbusError as e:
            return self._failed("discrete inputs", e)

    def handle_holding_registers(self, request: HoldingRegistersRequest) -> Response:
        self._log_request("holding_registers", request, request.is_write, request.args)
        try:
            self._check_shape(request, request.is_write, request.args)
            if request.is_write and request.quantity == 1:
                self.handler.write_single_register(request.address, request.args[0])
                return Response()

            if request.is_write:
                self.handler.write_multiple_registers(request.address, request.args[:request.quantity])
                return Response()

            return Response(values=self.handler.read_holding_registers(request.address, request.quantity))
        except ModbusError as e:
            return self._failed("holding registers", e)

    def handle_input_registers(self, request: InputRegistersRequest) -> Response:
        self._log_request("input_registers", request)
        try:
            self._check_shape(request)
            return Response(values=self.handler.read_input_registers(request.address, request.quantity))
        except ModbusError as e:
            return self._failed("input registers", e)

    def _log_request(self, kind: str, request, is_write: bool = False, args=None) -> None:
        self.log_manager.debug(LOG_REQUEST_SEPARATOR)
        self.log_manager.log_request(
            kind,
            unit_id=request.unit_id,
            address=request.address,
            quantity=request.quantity,
            is_write=is_write,
            args=args,
        )

    @staticmethod
    def _check_shape(request, is_write: bool = False, args=None) -> None:
        if request.quantity < 1:
            raise IllegalValue(f"quantity must be at least 1, got {request.quantity}")
        if is_write and len(args or []) < request.quantity:
            raise IllegalValue(
                f"write of {request.quantity} values carries only {len(args or [])} arguments"
            )

    def _failed(self, kind: str, error: ModbusError) -> Response:
        self.log_manager.error(f"handle {kind}: {error}")
        return Response(error=error)
