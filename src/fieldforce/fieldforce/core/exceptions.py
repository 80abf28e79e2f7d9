class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when the operation collides with existing state (duplicate, overlap)."""


class InvalidStateError(DomainError):
    """Raised when an entity is not in a state that allows the transition."""


class PolicyError(DomainError):
    """Raised when a business policy forbids the operation (restricted period, geofence)."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""
