class DomainError(Exception):
    """Base exception for business rule violations.

    `status_code` is the HTTP status the request-handler boundary answers with.
    """

    status_code = 400

    def __init__(self, message: str = "", **extra):
        super().__init__(message)
        # Extra fields are merged into the JSON error body (e.g. a rejected distance).
        self.extra = extra


class ValidationError(DomainError):
    """Raised when input data is missing, invalid or violates domain rules."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when there is no authenticated identity or credentials are wrong."""

    status_code = 401


class NotFoundError(DomainError):
    """Raised when a referenced row does not exist (or is not visible)."""

    status_code = 404


class ConflictError(DomainError):
    """Raised for duplicate submissions and uniqueness clashes."""

    status_code = 409
