# ==========================================
# apps/lifecycle/models.py
# ==========================================

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models import Q
import uuid


class DeletionStatus(models.TextChoices):
    SCHEDULED = 'scheduled', 'Scheduled'
    EXECUTING = 'executing', 'Executing'
    CANCELLED = 'cancelled', 'Cancelled'
    EXECUTED = 'executed', 'Executed'


# A user may hold at most one record in these statuses
ACTIVE_DELETION_STATUSES = [DeletionStatus.SCHEDULED, DeletionStatus.EXECUTING]


class DeletionRecord(models.Model):
    """
    One account deletion request and its outcome.

    Records are never deleted; cancelled and executed rows are the
    deletion history of the account.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='deletion_records')
    scheduled_for = models.DateTimeField()
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=DeletionStatus.choices, default=DeletionStatus.SCHEDULED)

    requested_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_reason = models.TextField(blank=True)
    claimed_at = models.DateTimeField(null=True, blank=True)
    executed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'deletion_records'
        constraints = [
            models.UniqueConstraint(
                fields=['user'],
                condition=Q(status__in=['scheduled', 'executing']),
                name='unique_active_deletion_per_user',
            ),
        ]
        indexes = [
            models.Index(fields=['status', 'scheduled_for'], name='deletion_status_due_idx'),
        ]
        ordering = ['-requested_at']

    def __str__(self):
        return f"Deletion of {self.user_id} ({self.status}, due {self.scheduled_for:%Y-%m-%d})"


class ActivityType(models.TextChoices):
    DELETION_SCHEDULED = 'account_deletion_scheduled', 'Account deletion scheduled'
    DELETION_RESCHEDULED = 'account_deletion_rescheduled', 'Account deletion rescheduled'
    DELETION_RECOVERED = 'account_deletion_recovered', 'Account deletion recovered'
    DELETION_EXECUTED = 'account_deletion_executed', 'Account deletion executed'
    DELETION_FAILED = 'account_deletion_failed', 'Account deletion failed'
    OWNERSHIP_TRANSFERRED = 'organization_ownership_transferred', 'Organization ownership transferred'
    ORGANIZATION_DISSOLVED = 'organization_dissolved', 'Organization dissolved'
    MEMBERSHIP_REMOVED = 'organization_membership_removed', 'Organization membership removed'
    SUBSCRIPTION_CANCELED = 'subscription_canceled', 'Subscription canceled'
    SUBSCRIPTION_CANCEL_FAILED = 'subscription_cancellation_failed', 'Subscription cancellation failed'
    EXPORT_CREATED = 'data_export_created', 'Data export created'
    EXPORT_FAILED = 'data_export_failed', 'Data export failed'
    NOTIFICATION_FAILED = 'notification_failed', 'Notification failed'


class ActivityOutcome(models.TextChoices):
    SUCCESS = 'success', 'Success'
    DEGRADED = 'degraded', 'Degraded'
    FAILURE = 'failure', 'Failure'


class ActivityRecord(models.Model):
    """Append-only audit entry for one lifecycle transition."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.PROTECT, related_name='activity_records')
    activity_type = models.CharField(max_length=50, choices=ActivityType.choices, db_index=True)
    description = models.CharField(max_length=255)
    outcome = models.CharField(max_length=20, choices=ActivityOutcome.choices, default=ActivityOutcome.SUCCESS)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activity_records'
        indexes = [
            models.Index(fields=['user', 'created_at'], name='activity_user_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.activity_type} ({self.outcome})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Activity records are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Activity records are append-only")


class DataExport(models.Model):
    """Persisted export snapshot, downloadable by its owner until it expires."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='data_exports')
    deletion_record = models.ForeignKey(
        DeletionRecord,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='exports',
    )
    export_version = models.CharField(max_length=10)
    payload = models.JSONField(encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()

    class Meta:
        db_table = 'data_exports'
        ordering = ['-created_at']

    def __str__(self):
        return f"Export {self.id} for {self.user_id}"

    def is_expired(self, now):
        return now >= self.expires_at
