"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class PasswordConfirmationError(AccountsServiceError):
    """Raised when password confirmation fails."""
    pass


class ConfirmationPhraseError(AccountsServiceError):
    """Raised when the typed confirmation phrase does not match."""
    pass
