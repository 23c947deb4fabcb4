"""
Domain-specific exceptions for the account lifecycle services.

These exceptions represent rejected lifecycle transitions and should be
caught in views and converted to appropriate HTTP responses. None of them
is raised after a state change has been committed.
"""


class LifecycleServiceError(Exception):
    """Base exception for all lifecycle service errors."""
    pass


class DeletionAlreadyExecutingError(LifecycleServiceError):
    """Raised when a deletion request arrives while the account is being purged."""
    pass


class DeletionNotScheduledError(LifecycleServiceError):
    """Raised when recovery is attempted for an account with no deletion record."""
    pass


class AccountNotRecoverableError(LifecycleServiceError):
    """
    Raised when a deletion record exists but can no longer be cancelled.

    ``reason`` is one of ``cancelled``, ``executing``, ``executed`` or ``expired``.
    """

    def __init__(self, message, *, reason):
        super().__init__(message)
        self.reason = reason


class ExportNotFoundError(LifecycleServiceError):
    """Raised when a data export does not exist or belongs to another user."""
    pass


class ExportExpiredError(LifecycleServiceError):
    """Raised when a data export is past its retention window."""
    pass
