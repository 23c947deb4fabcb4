"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserNotFoundError,
    PasswordConfirmationError,
    ConfirmationPhraseError,
)
from .account_management import (
    DELETION_CONFIRMATION_PHRASE,
    get_user,
    verify_deletion_credentials,
    anonymize_user_account,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserNotFoundError',
    'PasswordConfirmationError',
    'ConfirmationPhraseError',
    # Services
    'DELETION_CONFIRMATION_PHRASE',
    'get_user',
    'verify_deletion_credentials',
    'anonymize_user_account',
]
