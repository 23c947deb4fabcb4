"""
Tests for the subscription terminator.

Tests cover:
- Only open subscriptions are closed
- Provider calls and their failure handling
- Audit records for cancellations and failures
"""

import pytest
from django.db import transaction

from apps.billing.models import Subscription, SubscriptionStatus
from apps.lifecycle.models import ActivityOutcome, ActivityRecord, ActivityType
from apps.lifecycle.services import SubscriptionTerminator

from .fakes import T0, FailingBillingProvider


@pytest.fixture
def terminator(billing_provider, auditor, clock):
    return SubscriptionTerminator(billing_provider=billing_provider, auditor=auditor, clock=clock)


@pytest.mark.django_db
class TestCloseLocal:

    def test_closes_only_open_subscriptions(self, terminator, user, make_subscription):
        active = make_subscription(user, SubscriptionStatus.ACTIVE, 'sub_active')
        trialing = make_subscription(user, SubscriptionStatus.TRIALING, 'sub_trial')
        past_due = make_subscription(user, SubscriptionStatus.PAST_DUE, 'sub_past_due')
        unpaid = make_subscription(user, SubscriptionStatus.UNPAID, 'sub_unpaid')

        with transaction.atomic():
            closed = terminator.close_local(user=user)

        assert {s.id for s in closed} == {active.id, trialing.id, past_due.id}
        for subscription in (active, trialing, past_due):
            subscription.refresh_from_db()
            assert subscription.status == SubscriptionStatus.CANCELED
            assert subscription.canceled_at == T0
        unpaid.refresh_from_db()
        assert unpaid.status == SubscriptionStatus.UNPAID

    def test_other_users_untouched(self, terminator, user, other_user, make_subscription):
        theirs = make_subscription(other_user, external_reference='sub_theirs')

        with transaction.atomic():
            terminator.close_local(user=user)

        theirs.refresh_from_db()
        assert theirs.status == SubscriptionStatus.ACTIVE

    def test_close_is_audited(self, terminator, user, make_subscription):
        subscription = make_subscription(user, SubscriptionStatus.TRIALING)

        with transaction.atomic():
            terminator.close_local(user=user)

        record = ActivityRecord.objects.get(user=user, activity_type=ActivityType.SUBSCRIPTION_CANCELED)
        assert record.metadata == {
            'subscription_id': str(subscription.id),
            'previous_status': SubscriptionStatus.TRIALING,
        }


@pytest.mark.django_db
class TestTerminate:

    def test_subscription_closure(self, terminator, billing_provider, user, make_subscription):
        make_subscription(user, SubscriptionStatus.ACTIVE, 'sub_1')
        make_subscription(user, SubscriptionStatus.PAST_DUE, 'sub_2')

        outcomes = terminator.terminate(user=user)

        assert all(o.external_canceled for o in outcomes)
        assert sorted(billing_provider.cancelled) == ['sub_1', 'sub_2']
        assert not Subscription.objects.filter(
            user=user,
            status__in=[SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING, SubscriptionStatus.PAST_DUE],
        ).exists()

    def test_terminate_twice_is_harmless(self, terminator, billing_provider, user, make_subscription):
        make_subscription(user)

        terminator.terminate(user=user)
        outcomes = terminator.terminate(user=user)

        assert outcomes == []
        assert billing_provider.cancelled == ['sub_123']

    def test_subscription_without_external_reference(self, terminator, billing_provider, user, make_subscription):
        make_subscription(user, external_reference='')

        outcomes = terminator.terminate(user=user)

        assert outcomes[0].external_canceled is True
        assert billing_provider.cancelled == []

    def test_provider_failure_recorded_not_raised(self, auditor, clock, user, make_subscription):
        provider = FailingBillingProvider()
        terminator = SubscriptionTerminator(billing_provider=provider, auditor=auditor, clock=clock)
        subscription = make_subscription(user)

        outcomes = terminator.terminate(user=user)

        assert outcomes[0].external_canceled is False
        assert outcomes[0].error == "Request timed out"
        subscription.refresh_from_db()
        assert subscription.status == SubscriptionStatus.CANCELED
        assert subscription.external_cancel_error == "Request timed out"

        failure = ActivityRecord.objects.get(user=user, activity_type=ActivityType.SUBSCRIPTION_CANCEL_FAILED)
        assert failure.outcome == ActivityOutcome.DEGRADED
        assert failure.metadata['external_reference'] == 'sub_123'

    def test_successful_retry_clears_error(self, terminator, billing_provider, user, make_subscription):
        subscription = make_subscription(user, SubscriptionStatus.CANCELED)
        Subscription.objects.filter(id=subscription.id).update(external_cancel_error='Request timed out')
        subscription.refresh_from_db()

        terminator.cancel_external(user=user, subscriptions=[subscription])

        subscription.refresh_from_db()
        assert subscription.external_cancel_error == ''
        assert billing_provider.cancelled == ['sub_123']
