# ==========================================
# apps/billing/models.py
# ==========================================

from django.db import models
import uuid


class SubscriptionStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    TRIALING = 'trialing', 'Trialing'
    PAST_DUE = 'past_due', 'Past due'
    INCOMPLETE = 'incomplete', 'Incomplete'
    UNPAID = 'unpaid', 'Unpaid'
    CANCELED = 'canceled', 'Canceled'


# Statuses that still bill the customer
OPEN_SUBSCRIPTION_STATUSES = [
    SubscriptionStatus.ACTIVE,
    SubscriptionStatus.TRIALING,
    SubscriptionStatus.PAST_DUE,
]


class Subscription(models.Model):
    """Recurring-billing subscription mirrored from the billing provider."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='subscriptions')
    external_reference = models.CharField(max_length=255, blank=True, db_index=True)
    plan = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=20, choices=SubscriptionStatus.choices, default=SubscriptionStatus.ACTIVE)
    canceled_at = models.DateTimeField(null=True, blank=True)

    # Set when the provider could not be reached; cleared by reconciliation
    external_cancel_error = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subscriptions'
        indexes = [
            models.Index(fields=['user', 'status'], name='subscriptions_user_status_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.external_reference or self.id} ({self.status})"

    @property
    def is_open(self):
        return self.status in OPEN_SUBSCRIPTION_STATUSES
