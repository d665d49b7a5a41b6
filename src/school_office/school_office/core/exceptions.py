class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidRecord(ValidationError):
    """Raised when an attendance submission contains a bad record.

    The whole submission is rejected; nothing is written.
    """


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class HolidayConflict(DomainError):
    """Raised when attendance targets a holiday without an explicit override."""

    def __init__(self, message: str, *, reason: str | None = None):
        super().__init__(message)
        self.reason = reason


class DuplicateKeyConflict(DomainError):
    """Raised when a unique key already exists (lost insert race).

    Callers should retry the operation as an update.
    """


class StoreUnavailable(DomainError):
    """Raised when the backing store cannot be reached.

    Safe to retry: the failed operation left no partial state.
    """
