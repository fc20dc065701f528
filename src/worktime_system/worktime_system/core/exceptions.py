class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class FinalizedRecordError(DomainError):
    """Raised when a status transition is attempted on a finalized entry."""


class PerEmployeeProcessingError(DomainError):
    """Raised when one employee's data cannot be loaded or merged."""

    def __init__(self, username: str, message: str):
        super().__init__(f"{username}: {message}")
        self.username = username


class StoreUnavailableError(DomainError):
    """Raised when the record store cannot serve a required read or write."""


class UnsupportedOperationError(DomainError):
    """Raised when a store origin does not support the requested operation."""
