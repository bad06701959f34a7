class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class BusinessRuleError(DomainError):
    """Raised when an action is not allowed in the current state (e.g. check-in during break)."""


class ConflictError(DomainError):
    """Raised when a write loses against a concurrent or earlier write."""


class PersistenceError(DomainError):
    """Raised when the data store fails to read or write."""
