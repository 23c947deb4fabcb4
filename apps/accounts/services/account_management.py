"""Account management service."""

from uuid import UUID

from django.contrib.auth import get_user_model

from .exceptions import (
    ConfirmationPhraseError,
    PasswordConfirmationError,
    UserNotFoundError,
)

User = get_user_model()

DELETION_CONFIRMATION_PHRASE = 'DELETE'


def get_user(*, user_id: UUID, for_update: bool = False) -> User:
    """
    Load a user by ID.

    Args:
        user_id: User's ID
        for_update: Lock the user row (caller must be inside a transaction)

    Raises:
        UserNotFoundError: If the user does not exist
    """
    queryset = User.objects.all()
    if for_update:
        queryset = queryset.select_for_update()

    try:
        return queryset.get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")


def verify_deletion_credentials(*, user: User, password: str, confirmation: str) -> None:
    """
    Gate for destructive account operations.

    Runs before any state is touched, so a failure here has no side effects.

    Args:
        user: User requesting the operation
        password: User's current password
        confirmation: Phrase the user typed to confirm

    Raises:
        ConfirmationPhraseError: If confirmation is not exactly "DELETE"
        PasswordConfirmationError: If password is incorrect
    """
    if confirmation != DELETION_CONFIRMATION_PHRASE:
        raise ConfirmationPhraseError(
            f"Please type {DELETION_CONFIRMATION_PHRASE} to confirm account deletion"
        )

    if not password or not user.check_password(password):
        raise PasswordConfirmationError("Password is incorrect")


def anonymize_user_account(*, user: User) -> User:
    """
    GDPR-compliant account removal (anonymization).

    The row itself is kept so deletion history and the audit trail stay
    attached to it; every identifying attribute is overwritten.
    """
    user.anonymize()
    return user
