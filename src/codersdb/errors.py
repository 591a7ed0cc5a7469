"""Custom exceptions for codersdb.

This module defines the exception hierarchy for the value store. Validation
errors are raised before any storage access and are never swallowed; they
also subclass ``TypeError`` because each one reports a wrong or missing
argument. Storage failures are not represented here: the store turns them
into ``None``/``False`` results instead of raising.
"""

from typing import Any, Optional


class CodersDBError(Exception):
    """Base exception for all codersdb errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        context: Additional context information about the error
    """

    def __init__(
        self, message: str, error_code: str, context: Optional[dict[str, Any]] = None
    ) -> None:
        """Initialize codersdb error.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code
            context: Optional additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class StoreClosedError(CodersDBError):
    """Raised when an operation is issued after ``close()``."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            message=f"Cannot run '{operation}' on a closed store",
            error_code="store_closed",
            context={"operation": operation},
        )


class ValidationError(CodersDBError, TypeError):
    """Base class for argument and stored-type validation failures."""


class InvalidKeyError(ValidationError):
    """Raised when a key is missing, empty or not a string."""

    def __init__(self, key: Any = None) -> None:
        super().__init__(
            message="No Key Specified",
            error_code="invalid_key",
            context={"key": key},
        )


class InvalidAmountError(ValidationError):
    """Raised when a numeric operation receives a non-number amount."""

    def __init__(self, amount: Any) -> None:
        super().__init__(
            message="Amount Must Be A Number",
            error_code="invalid_amount",
            context={"amount_type": type(amount).__name__},
        )


class InvalidDataError(ValidationError):
    """Raised when an amount is positive or negative infinity."""

    def __init__(self, data: Any) -> None:
        super().__init__(
            message="Data Cannot Be Infinity",
            error_code="invalid_data",
            context={"data": data},
        )


class MissingValueError(ValidationError):
    """Raised when ``set`` is called without a value."""

    def __init__(self, key: str) -> None:
        super().__init__(
            message="No Value Specified",
            error_code="missing_value",
            context={"key": key},
        )


class MissingElementError(ValidationError):
    """Raised when ``push`` or ``pull`` is called without an element."""

    def __init__(self, key: str) -> None:
        super().__init__(
            message="No Element Specified",
            error_code="missing_element",
            context={"key": key},
        )


class NotANumberError(ValidationError):
    """Raised when a strict numeric operation finds a non-number stored value.

    ``subtract`` and ``math`` never seed a default, so a missing key also
    raises this error.
    """

    def __init__(self, key: str, stored_type: str) -> None:
        super().__init__(
            message="Stored Value Must Be A Number",
            error_code="not_a_number",
            context={"key": key, "stored_type": stored_type},
        )


class NotAnArrayError(ValidationError):
    """Raised when ``pull`` finds a stored value that is not a list."""

    def __init__(self, key: str, stored_type: str) -> None:
        super().__init__(
            message="Stored Value Must Be An Array",
            error_code="not_an_array",
            context={"key": key, "stored_type": stored_type},
        )


class InvalidOperatorError(ValidationError):
    """Raised when ``math`` receives an operator outside ``+ - * / %``."""

    def __init__(self, operator: Any) -> None:
        super().__init__(
            message="Invalid Operator",
            error_code="invalid_operator",
            context={"operator": operator},
        )


class InvalidFilterError(ValidationError):
    """Raised when ``filter`` receives a predicate that is not callable."""

    def __init__(self, predicate: Any) -> None:
        super().__init__(
            message="Filter Must Be A Function",
            error_code="invalid_filter",
            context={"predicate_type": type(predicate).__name__},
        )
