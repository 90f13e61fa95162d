"""Errors raised on the master side."""


class ClientError(Exception):
    """Connection management failure."""


class NoClient(ClientError):
    """No client has been created yet."""

    def __init__(self):
        super().__init__("no client")


class NotConnected(ClientError):
    """A client exists but its connection is not established."""

    def __init__(self):
        super().__init__("connection not established")


class ModbusRequestError(Exception):
    """A request still failed after every retry.

    ``exception_code`` is the Modbus exception code the slave answered
    with, or None if the request never got an answer.
    """

    def __init__(self, message: str, exception_code=None):
        self.exception_code = exception_code
        super().__init__(message)
