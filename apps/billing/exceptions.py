"""Domain exceptions for billing app."""


class BillingServiceError(Exception):
    """Base exception for billing errors."""
    pass


class BillingProviderError(BillingServiceError):
    """Raised when the billing provider cannot complete a request."""
    pass


class UnknownBillingProviderError(BillingServiceError):
    """Raised when settings name a provider that does not exist."""
    pass
