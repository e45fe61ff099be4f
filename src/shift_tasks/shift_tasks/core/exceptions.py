class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 500


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when a credential is missing, invalid or expired."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a referenced task, user or position does not exist."""

    status_code = 404


class AlreadyExistsError(DomainError):
    """Raised when a unique key (e.g. user email) is already taken."""

    status_code = 409


class InvalidReferenceError(DomainError):
    """Raised when a write points at a row that does not exist (foreign key)."""

    status_code = 400


class StorageError(DomainError):
    """Raised when a storage operation failed and was rolled back."""

    status_code = 500
