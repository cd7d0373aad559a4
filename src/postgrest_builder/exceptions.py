"""Library exceptions for the postgrest_builder package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from postgrest_builder.response import PostgrestErrorBody


class PostgrestBuilderError(Exception):
    """Base exception for postgrest_builder library."""

    pass


class ContractViolationError(PostgrestBuilderError):
    """
    Raised when a builder operation is called with input it does not accept.

    Contract violations are programmer errors. They are raised at the call
    site, before any query string is produced, so a malformed filter can
    never reach the server.
    """

    pass


class InvalidOperatorError(ContractViolationError):
    """Raised when an operator token is outside the supported vocabulary."""

    def __init__(self, token: Any, reason: str | None = None) -> None:
        self.token = token
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid operator {token!r}{detail}")


class InvalidArgumentError(ContractViolationError):
    """
    Raised when an argument has the wrong shape or type.

    Attributes:
        operation: Name of the builder operation that rejected the argument
        argument: Name of the rejected argument
        expected: Human-readable description of what was expected
        actual: The value that was passed
    """

    def __init__(self, operation: str, argument: str, expected: str, actual: Any) -> None:
        self.operation = operation
        self.argument = argument
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{operation}() expected {argument} to be {expected}, "
            f"got {type(actual).__name__}: {actual!r}"
        )


class EncodeError(PostgrestBuilderError):
    """Raised when a request body cannot be serialized."""

    def __init__(self, value_type: str, message: str) -> None:
        self.value_type = value_type
        super().__init__(f"Cannot encode body of type {value_type}: {message}")


class TransportError(PostgrestBuilderError):
    """Raised by a transport when the HTTP exchange itself fails."""

    pass


class PostgrestAPIError(PostgrestBuilderError):
    """
    Raised when the server answers with an error status and an error body.

    Attributes:
        status: HTTP status code of the response
        error: Decoded error body (message, code, details, hint)
    """

    def __init__(self, status: int, error: PostgrestErrorBody) -> None:
        self.status = status
        self.error = error
        code_info = f" [{error.code}]" if error.code else ""
        super().__init__(f"PostgREST error {status}{code_info}: {error.message}")

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def code(self) -> Any:
        return self.error.code

    @property
    def hint(self) -> Any:
        return self.error.hint

    @property
    def details(self) -> Any:
        return self.error.details


__all__ = [
    "PostgrestBuilderError",
    "ContractViolationError",
    "InvalidOperatorError",
    "InvalidArgumentError",
    "EncodeError",
    "TransportError",
    "PostgrestAPIError",
]
