"""Exception hierarchy for the Dece contract API."""

from collections.abc import Sequence
from typing import Any


class DeceProtocolError(Exception):
    """Base exception for all Dece protocol errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DeceProtocolError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class ArgumentCountError(ValidationError):
    """Raised when a call supplies the wrong number of contract arguments."""

    def __init__(self, function_name: str, expected: int, received: int):
        super().__init__(
            f"Invalid number of arguments to {function_name}: expected {expected}, got {received}",
            field="args",
            value=received,
        )
        self.function_name = function_name
        self.expected = expected
        self.received = received


class PayableError(ValidationError):
    """Raised when value is sent to a non-payable function."""

    def __init__(self, function_name: str, value: Any):
        super().__init__(
            f"Cannot send value to non-payable function {function_name}",
            field="value",
            value=value,
        )
        self.function_name = function_name


class AbiEncodingError(DeceProtocolError):
    """Raised when arguments cannot be ABI encoded for the declared types."""

    def __init__(
        self,
        message: str,
        types: Sequence[str] | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.types = list(types or [])


class AbiDecodingError(DeceProtocolError):
    """Raised when returned bytes do not decode as the declared output types."""

    def __init__(self, message: str, output: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.output = output

    def __str__(self) -> str:
        if self.output is None:
            return self.message
        return f"{self.message}\noutput = {self.output}"


class RevertError(DeceProtocolError):
    """Raised when the ledger returns a structured revert reason."""

    def __init__(self, reason: str, output: str | None = None):
        super().__init__(f"execution reverted, reason = {reason}", {"output": output})
        self.reason = reason
        self.output = output


class NetworkError(DeceProtocolError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code
