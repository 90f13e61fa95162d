"""Decorators wrapped around the adapter, and pipeline assembly."""

from .adapter import AdapterHandler
from .errors import UnsupportedUnit
from .handler import ModbusHandler
from .requests import (
    CoilsRequest,
    DiscreteInputsRequest,
    HoldingRegistersRequest,
    InputRegistersRequest,
    RequestHandler,
    Response,
)
from .store import ModbusStore

DEFAULT_UNIT_ID = 1


class ValidationMiddleware(RequestHandler):
    """Reject requests addressed to a unit id other than the configured one.

    A rejected request never reaches the wrapped stage, so no store access
    happens for it.
    """

    def __init__(self, base: RequestHandler, log_manager, unit_id: int = DEFAULT_UNIT_ID):
        self.base = base
        self.log_manager = log_manager
        self.unit_id = unit_id

    def handle_coils(self, request: CoilsRequest) -> Response:
        if request.unit_id != self.unit_id:
            return self._reject("handle_coils", request)
        return self.base.handle_coils(request)

    def handle_discrete_inputs(self, request: DiscreteInputsRequest) -> Response:
        if request.unit_id != self.unit_id:
            return self._reject("handle_discrete_inputs", request)
        return self.base.handle_discrete_inputs(request)

    def handle_holding_registers(self, request: HoldingRegistersRequest) -> Response:
        if request.unit_id != self.unit_id:
            return self._reject("handle_holding_registers", request)
        return self.base.handle_holding_registers(request)

    def handle_input_registers(self, request: InputRegistersRequest) -> Response:
        if request.unit_id != self.unit_id:
            return self._reject("handle_input_registers", request)
        return self.base.handle_input_registers(request)

    def _reject(self, name: str, request) -> Response:
        self.log_manager.error(f"{name} accessed with wrong unit id: {request.unit_id}")
        return Response(error=UnsupportedUnit(request.unit_id))


class FallbackMiddleware(RequestHandler):
    """Guarantee a non-empty result list for the transport.

    When the wrapped stage answers without values (writes, failures), the
    values are replaced by [False] or [0]. The error, if any, is kept.
    """

    def __init__(self, base: RequestHandler, log_manager):
        self.base = base
        self.log_manager = log_manager

    def handle_coils(self, request: CoilsRequest) -> Response:
        return self._fallback("handle_coils", self.base.handle_coils(request), False)

    def handle_discrete_inputs(self, request: DiscreteInputsRequest) -> Response:
        return self._fallback("handle_discrete_inputs", self.base.handle_discrete_inputs(request), False)

    def handle_holding_registers(self, request: HoldingRegistersRequest) -> Response:
        return self._fallback("handle_holding_registers", self.base.handle_holding_registers(request), 0)

    def handle_input_registers(self, request: InputRegistersRequest) -> Response:
        return self._fallback("handle_input_registers", self.base.handle_input_registers(request), 0)

    def _fallback(self, name: str, response: Response, default) -> Response:
        if response.values:
            return response

        self.log_manager.debug(f"{name} returned no values, falling back to [{default}]")
        return Response(values=[default], error=response.error)


def build_pipeline(store: ModbusStore, log_manager, unit_id: int = DEFAULT_UNIT_ID) -> RequestHandler:
    """Compose Fallback(Validation(Adapter(Handler(store))))."""
    handler = ModbusHandler(store, log_manager)
    adapter = AdapterHandler(handler, log_manager)
    validation = ValidationMiddleware(adapter, log_manager, unit_id=unit_id)
    return FallbackMiddleware(validation, log_manager)
