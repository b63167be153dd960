"""Register error codes and exceptions."""

from enum import Enum


class ErrorCode(Enum):
    """Register error codes."""

    VALIDATION = "VALIDATION"
    INVALID_STATE = "INVALID_STATE"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    PERSISTENCE = "PERSISTENCE"
    SERIALIZATION = "SERIALIZATION"


class RegisterError(Exception):
    """Base register error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(RegisterError):
    """Raised for bad operator input: empty UPC, quantity below 1, negative price."""

    code = ErrorCode.VALIDATION


class InvalidStateError(RegisterError):
    """Raised when an operation is not allowed in the transaction's current state."""

    code = ErrorCode.INVALID_STATE


class LimitExceededError(RegisterError):
    """Raised when the suspension ceiling has been reached."""

    code = ErrorCode.LIMIT_EXCEEDED

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"Maximum of {limit} suspended transactions reached. "
            f"Resume or delete an existing suspension first."
        )
        self.limit = limit


class ConflictError(RegisterError):
    """Raised when resuming while the live transaction still has items."""

    code = ErrorCode.CONFLICT


class NotFoundError(RegisterError):
    """Raised when a suspension id is unknown."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, suspension_id: str) -> None:
        super().__init__(f"Suspension not found: {suspension_id}")
        self.suspension_id = suspension_id


class PersistenceError(RegisterError):
    """Raised when the backing store fails to apply a change."""

    code = ErrorCode.PERSISTENCE


class SerializationError(RegisterError):
    """Raised when a suspended item payload cannot be decoded."""

    code = ErrorCode.SERIALIZATION
