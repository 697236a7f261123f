class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced overtime record does not exist."""


class InvalidStateTransition(DomainError):
    """Raised when an update or decision targets a record that is no longer PENDING."""


class StoreError(DomainError):
    """Raised when the persistence layer fails."""
