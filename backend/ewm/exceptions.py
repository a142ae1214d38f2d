"""Domain errors raised by the service layer.

Services raise these at the point of detection; the FastAPI handler in
``ewm.main`` maps each kind to its HTTP status.
"""
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes; values are the HTTP status names reported to clients."""

    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "BAD_REQUEST"
    CONFLICT = "CONFLICT"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.CONFLICT
    status_code: int = 409
    reason: str = "For the requested operation the conditions are not met."

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Referenced entity does not exist or is not visible to the caller."""

    code = ErrorCode.NOT_FOUND
    status_code = 404
    reason = "The required object was not found."


class ValidationError(DomainError):
    """Input is invalid regardless of stored state."""

    code = ErrorCode.VALIDATION
    status_code = 400
    reason = "Incorrectly made request."


class ConflictError(DomainError):
    """Well-formed request that violates a business rule given current state."""

    code = ErrorCode.CONFLICT
    status_code = 409
    reason = "For the requested operation the conditions are not met."
