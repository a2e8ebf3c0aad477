class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the caller is not logged in or credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when the addressed entity does not exist for the tenant."""


class ConflictError(DomainError):
    """Raised when a write collides with existing data.

    `details` carries whatever the client needs to show the collision
    (e.g. the conflicting sessions).
    """

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.details = details
