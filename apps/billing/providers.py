"""
Billing provider adapters.

The lifecycle services only need one capability from a provider: cancel a
recurring subscription by its external reference. Every adapter must make
that call idempotent, so cancelling an already cancelled (or already
removed) subscription succeeds silently.
"""

import logging

import stripe

from .exceptions import BillingProviderError, UnknownBillingProviderError

logger = logging.getLogger(__name__)


class BillingProvider:
    """Interface every billing adapter implements."""

    name = 'base'

    def cancel_subscription(self, external_reference: str) -> None:
        """
        Cancel a subscription at the provider.

        Raises:
            BillingProviderError: If the provider is unreachable or rejects the call
        """
        raise NotImplementedError


class NullBillingProvider(BillingProvider):
    """Provider for development and tests; nothing is billed externally."""

    name = 'null'

    def cancel_subscription(self, external_reference: str) -> None:
        logger.debug("Null billing provider: cancel %s", external_reference)


class StripeBillingProvider(BillingProvider):
    """Stripe adapter with a per-request network timeout."""

    name = 'stripe'

    def __init__(self, *, api_key: str, timeout: int = 10, max_network_retries: int = 1):
        if not api_key:
            raise UnknownBillingProviderError("STRIPE_SECRET_KEY is not configured")

        self.client = stripe.StripeClient(
            api_key,
            http_client=stripe.RequestsClient(timeout=timeout),
            max_network_retries=max_network_retries,
        )

    def cancel_subscription(self, external_reference: str) -> None:
        try:
            subscription = self.client.subscriptions.retrieve(external_reference)
            if subscription.status == 'canceled':
                logger.info("Stripe subscription %s already canceled", external_reference)
                return

            self.client.subscriptions.cancel(external_reference)
        except stripe.InvalidRequestError as e:
            if e.code == 'resource_missing':
                logger.info("Stripe subscription %s no longer exists", external_reference)
                return
            raise BillingProviderError(f"Stripe rejected cancellation of {external_reference}: {e}") from e
        except stripe.StripeError as e:
            raise BillingProviderError(f"Stripe cancellation of {external_reference} failed: {e}") from e


def get_billing_provider(*, name: str, api_key: str = '', timeout: int = 10) -> BillingProvider:
    """
    Build the billing provider named in settings.

    Raises:
        UnknownBillingProviderError: If name is not a known provider
    """
    if name == NullBillingProvider.name:
        return NullBillingProvider()
    if name == StripeBillingProvider.name:
        return StripeBillingProvider(api_key=api_key, timeout=timeout)

    raise UnknownBillingProviderError(f"Unknown billing provider: {name!r}")
