class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 422


class StateConflict(DomainError):
    """Raised when an operation violates the attendance or leave state machine."""

    status_code = 409


class NotFound(DomainError):
    """Raised when a record or employee does not exist."""

    status_code = 404


class ConcurrencyConflict(DomainError):
    """Raised when two writers race on the same (employee, date) key."""

    status_code = 409


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
