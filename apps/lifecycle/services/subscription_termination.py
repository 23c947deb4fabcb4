"""
Subscription terminator.

Closing a user's subscriptions happens in two stages. The local rows are
set to ``canceled`` inside the core transaction, so no open subscription
survives a committed deletion request. The provider call runs after the
commit: it may be slow or unavailable, and a failure there is recorded
(on the row and in the audit trail) for reconciliation instead of
undoing the request.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.billing.exceptions import BillingProviderError
from apps.billing.models import OPEN_SUBSCRIPTION_STATUSES, Subscription, SubscriptionStatus
from apps.billing.providers import BillingProvider
from apps.lifecycle.models import ActivityOutcome, ActivityType

from .notifications import Auditor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CancellationOutcome:
    subscription_id: UUID
    external_reference: str
    external_canceled: bool
    error: Optional[str] = None


class SubscriptionTerminator:
    """Cancels every open subscription of a user."""

    def __init__(self, *, billing_provider: BillingProvider, auditor: Auditor, clock: Callable = timezone.now):
        self.billing_provider = billing_provider
        self.auditor = auditor
        self.clock = clock

    def close_local(self, *, user: User) -> List[Subscription]:
        """
        Mark every open subscription as canceled.

        Must run inside the caller's transaction.

        Returns:
            The subscriptions that were closed
        """
        subscriptions = list(
            Subscription.objects
            .select_for_update()
            .filter(user=user, status__in=OPEN_SUBSCRIPTION_STATUSES)
            .order_by('created_at', 'id')
        )
        now = self.clock()
        for subscription in subscriptions:
            previous_status = subscription.status
            subscription.status = SubscriptionStatus.CANCELED
            subscription.canceled_at = now
            subscription.save(update_fields=['status', 'canceled_at', 'updated_at'])
            self.auditor.record(
                user=user,
                activity_type=ActivityType.SUBSCRIPTION_CANCELED,
                description=f"Canceled {subscription.plan or 'subscription'}",
                metadata={
                    'subscription_id': str(subscription.id),
                    'previous_status': previous_status,
                },
            )
        return subscriptions

    def cancel_external(self, *, user: User, subscriptions: List[Subscription]) -> List[CancellationOutcome]:
        """
        Cancel the given subscriptions at the billing provider.

        Never raises for provider failures; each failure is stored on the
        subscription and written to the audit trail as degraded.
        """
        outcomes = []
        for subscription in subscriptions:
            if not subscription.external_reference:
                outcomes.append(CancellationOutcome(subscription.id, '', external_canceled=True))
                continue

            try:
                self.billing_provider.cancel_subscription(subscription.external_reference)
            except BillingProviderError as e:
                logger.warning(
                    "Billing cancellation of %s for user %s failed: %s",
                    subscription.external_reference, user.id, e,
                )
                Subscription.objects.filter(id=subscription.id).update(external_cancel_error=str(e))
                self.auditor.record_best_effort(
                    user=user,
                    activity_type=ActivityType.SUBSCRIPTION_CANCEL_FAILED,
                    description="Billing provider cancellation failed",
                    outcome=ActivityOutcome.DEGRADED,
                    metadata={
                        'subscription_id': str(subscription.id),
                        'external_reference': subscription.external_reference,
                        'error': str(e),
                    },
                )
                outcomes.append(
                    CancellationOutcome(subscription.id, subscription.external_reference, False, error=str(e))
                )
                continue

            if subscription.external_cancel_error:
                Subscription.objects.filter(id=subscription.id).update(external_cancel_error='')
            outcomes.append(CancellationOutcome(subscription.id, subscription.external_reference, True))
        return outcomes

    def terminate(self, *, user: User) -> List[CancellationOutcome]:
        """Close locally and cancel externally in one call (outside any core transaction)."""
        with transaction.atomic():
            subscriptions = self.close_local(user=user)
        return self.cancel_external(user=user, subscriptions=subscriptions)
