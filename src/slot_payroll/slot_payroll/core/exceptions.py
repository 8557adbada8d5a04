class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a slot, employee or attendance record does not exist."""


class ConflictError(DomainError):
    """Raised on a duplicate attendance mark or an overlapping active slot."""


class InvalidStateError(DomainError):
    """Raised when approve/reject is attempted on a record that is not PENDING."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
