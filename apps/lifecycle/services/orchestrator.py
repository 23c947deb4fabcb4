"""
Account lifecycle manager.

Entry point for the deletion flows. Each flow is split into a core
transaction (state that must change together or not at all) followed by
a best-effort stage (billing provider calls, export persistence,
analytics, notifications) whose failures are logged and reported as
degraded steps but never roll back the core.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, List, Optional
from uuid import UUID

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.accounts.services import get_user, verify_deletion_credentials
from apps.lifecycle.models import (
    ActivityOutcome,
    ActivityType,
    DataExport,
    DeletionRecord,
    DeletionStatus,
)

from .account_purge import AccountPurger
from .deletion_scheduling import DeletionScheduler
from .exceptions import ExportExpiredError, ExportNotFoundError
from .export_snapshot import ExportSnapshotBuilder
from .notifications import Auditor, Notifier
from .organization_disposition import DispositionOutcome, OrganizationDispositionResolver
from .recovery import DeletionStatusView, RecoveryGate, days_until
from .subscription_termination import CancellationOutcome, SubscriptionTerminator

logger = logging.getLogger(__name__)


class DegradedStep:
    EXPORT = 'export'
    BILLING = 'billing'
    NOTIFICATION = 'notification'


@dataclass
class DeletionRequestOutcome:
    record: DeletionRecord
    created: bool
    grace_period_days: int
    export: Optional[DataExport] = None
    dispositions: List[DispositionOutcome] = field(default_factory=list)
    cancellations: List[CancellationOutcome] = field(default_factory=list)
    degraded_steps: List[str] = field(default_factory=list)

    @property
    def export_data_included(self):
        return self.export is not None


@dataclass
class RecoveryOutcome:
    record: DeletionRecord
    days_remaining: int
    notified: bool


@dataclass
class SweepSummary:
    claimed: List[UUID] = field(default_factory=list)
    executed: List[UUID] = field(default_factory=list)
    failed: List[UUID] = field(default_factory=list)


class LifecycleManager:
    """Sequences the lifecycle components for request, status, recovery and sweep."""

    def __init__(
        self,
        *,
        export_builder: ExportSnapshotBuilder,
        disposition_resolver: OrganizationDispositionResolver,
        subscription_terminator: SubscriptionTerminator,
        scheduler: DeletionScheduler,
        recovery_gate: RecoveryGate,
        purger: AccountPurger,
        notifier: Notifier,
        auditor: Auditor,
        export_retention: timedelta,
        sweep_batch_size: int = 100,
        stale_claim_after: timedelta = timedelta(hours=1),
        clock: Callable = timezone.now
    ):
        self.export_builder = export_builder
        self.disposition_resolver = disposition_resolver
        self.subscription_terminator = subscription_terminator
        self.scheduler = scheduler
        self.recovery_gate = recovery_gate
        self.purger = purger
        self.notifier = notifier
        self.auditor = auditor
        self.export_retention = export_retention
        self.sweep_batch_size = sweep_batch_size
        self.stale_claim_after = stale_claim_after
        self.clock = clock

    @property
    def grace_period_days(self) -> int:
        return self.scheduler.grace_period.days

    # =========================================================================
    # Request deletion
    # =========================================================================

    def request_deletion(
        self,
        *,
        user_id: UUID,
        password: str,
        confirmation: str,
        reason: str = '',
        export_data: bool = False
    ) -> DeletionRequestOutcome:
        """
        Schedule the user's account for deletion.

        Organization dispositions, local subscription closure and the
        deletion record commit together. The export snapshot is read
        before that transaction and persisted after it.

        Args:
            user_id: Account to delete
            password: Current password
            confirmation: Must be "DELETE"
            reason: Optional free-text reason
            export_data: Build and store a data export

        Returns:
            DeletionRequestOutcome

        Raises:
            UserNotFoundError: If the user does not exist
            ConfirmationPhraseError: If the confirmation phrase is wrong
            PasswordConfirmationError: If the password is wrong
            DeletionAlreadyExecutingError: If the account is being purged
        """
        user = get_user(user_id=user_id)
        verify_deletion_credentials(user=user, password=password, confirmation=confirmation)

        degraded = []
        snapshot = None
        export_error = None
        if export_data:
            try:
                snapshot = self.export_builder.build(user_id=user.id)
            except Exception as e:
                logger.exception("Export snapshot for user %s failed", user.id)
                export_error = str(e)
                degraded.append(DegradedStep.EXPORT)

        with transaction.atomic():
            user = get_user(user_id=user.id, for_update=True)
            dispositions = self.disposition_resolver.resolve_all(user=user)
            closed = self.subscription_terminator.close_local(user=user)
            record, created = self.scheduler.schedule(user=user, reason=reason)
            self.auditor.record(
                user=user,
                activity_type=ActivityType.DELETION_SCHEDULED if created else ActivityType.DELETION_RESCHEDULED,
                description="Account scheduled for deletion",
                metadata={
                    'deletion_record_id': str(record.id),
                    'scheduled_for': record.scheduled_for.isoformat(),
                    'grace_period_days': self.grace_period_days,
                    'reason': reason,
                    'export_requested': export_data,
                },
            )

        logger.info("Account %s scheduled for deletion on %s", user.id, record.scheduled_for)

        cancellations = self._cancel_external(user=user, subscriptions=closed)
        if any(not c.external_canceled for c in cancellations):
            degraded.append(DegradedStep.BILLING)

        export = None
        if snapshot is not None:
            export = self._persist_export(user=user, record=record, snapshot=snapshot)
            if export is None:
                degraded.append(DegradedStep.EXPORT)
        elif export_error is not None:
            self.auditor.record_best_effort(
                user=user,
                activity_type=ActivityType.EXPORT_FAILED,
                description="Data export could not be built",
                outcome=ActivityOutcome.DEGRADED,
                metadata={'deletion_record_id': str(record.id), 'error': export_error},
            )

        self.auditor.track_event(
            user=user,
            event_type=ActivityType.DELETION_SCHEDULED,
            event_data={
                'grace_period_days': self.grace_period_days,
                'export_requested': export_data,
            },
        )

        notified = self._notify(
            user=user,
            template='account_deletion_scheduled',
            metadata={
                'deletion_date': record.scheduled_for,
                'grace_period_days': self.grace_period_days,
                'days_remaining': days_until(record.scheduled_for, self.clock()),
                'export_id': str(export.id) if export else None,
                'export_expires_at': export.expires_at if export else None,
            },
        )
        if not notified:
            degraded.append(DegradedStep.NOTIFICATION)

        return DeletionRequestOutcome(
            record=record,
            created=created,
            grace_period_days=self.grace_period_days,
            export=export,
            dispositions=dispositions,
            cancellations=cancellations,
            degraded_steps=degraded,
        )

    def _cancel_external(self, *, user, subscriptions) -> List[CancellationOutcome]:
        if not subscriptions:
            return []
        try:
            return self.subscription_terminator.cancel_external(user=user, subscriptions=subscriptions)
        except DatabaseError:
            logger.exception("Recording billing cancellations for user %s failed", user.id)
            return [
                CancellationOutcome(s.id, s.external_reference, False, error='not recorded')
                for s in subscriptions
            ]

    def _notify(self, *, user, template: str, metadata: dict) -> bool:
        notified = self.notifier.notify(user_id=user.id, template=template, metadata=metadata)
        if not notified:
            self.auditor.record_best_effort(
                user=user,
                activity_type=ActivityType.NOTIFICATION_FAILED,
                description="Notification could not be delivered",
                outcome=ActivityOutcome.DEGRADED,
                metadata={'template': template},
            )
        return notified

    def _persist_export(self, *, user, record, snapshot) -> Optional[DataExport]:
        now = self.clock()
        try:
            with transaction.atomic():
                export = DataExport.objects.create(
                    user=user,
                    deletion_record=record,
                    export_version=snapshot['export_version'],
                    payload=snapshot,
                    expires_at=now + self.export_retention,
                )
        except DatabaseError as e:
            logger.exception("Storing data export for user %s failed", user.id)
            self.auditor.record_best_effort(
                user=user,
                activity_type=ActivityType.EXPORT_FAILED,
                description="Data export could not be stored",
                outcome=ActivityOutcome.DEGRADED,
                metadata={'deletion_record_id': str(record.id), 'error': str(e)},
            )
            return None

        self.auditor.record_best_effort(
            user=user,
            activity_type=ActivityType.EXPORT_CREATED,
            description="Data export created",
            metadata={
                'export_id': str(export.id),
                'expires_at': export.expires_at.isoformat(),
            },
        )
        return export

    # =========================================================================
    # Status, recovery, exports
    # =========================================================================

    def get_status(self, *, user_id: UUID) -> DeletionStatusView:
        user = get_user(user_id=user_id)
        return self.recovery_gate.get_status(user=user)

    def recover(self, *, user_id: UUID, reason: str = '') -> RecoveryOutcome:
        """
        Cancel a scheduled deletion inside the grace period.

        Only account access is restored; organization and subscription
        changes made at request time stay as they are.

        Raises:
            UserNotFoundError: If the user does not exist
            DeletionNotScheduledError: If no deletion was ever requested
            AccountNotRecoverableError: If the deletion can no longer be cancelled
        """
        user = get_user(user_id=user_id)

        with transaction.atomic():
            record = self.recovery_gate.recover(user=user, reason=reason)
            days_remaining = max(0, days_until(record.scheduled_for, record.cancelled_at))
            self.auditor.record(
                user=user,
                activity_type=ActivityType.DELETION_RECOVERED,
                description="Account deletion cancelled",
                metadata={
                    'deletion_record_id': str(record.id),
                    'days_remaining': days_remaining,
                    'reason': record.cancelled_reason,
                },
            )

        logger.info("Account %s recovered with %s day(s) remaining", user.id, days_remaining)

        self.auditor.track_event(
            user=user,
            event_type=ActivityType.DELETION_RECOVERED,
            event_data={'days_remaining': days_remaining},
        )
        notified = self._notify(
            user=user,
            template='account_deletion_recovered',
            metadata={'days_remaining': days_remaining},
        )
        return RecoveryOutcome(record=record, days_remaining=days_remaining, notified=notified)

    def get_export(self, *, user_id: UUID, export_id: UUID) -> DataExport:
        """
        Load a stored export for its owner.

        Raises:
            ExportNotFoundError: If the export does not exist or is not the user's
            ExportExpiredError: If the retention window has passed
        """
        try:
            export = DataExport.objects.get(id=export_id, user_id=user_id)
        except DataExport.DoesNotExist:
            raise ExportNotFoundError(f"Export with ID {export_id} not found")

        if export.is_expired(self.clock()):
            raise ExportExpiredError("This export has expired")
        return export

    # =========================================================================
    # Sweep
    # =========================================================================

    def _due_filter(self, now) -> Q:
        return (
            Q(status=DeletionStatus.SCHEDULED, scheduled_for__lte=now)
            | Q(status=DeletionStatus.EXECUTING, claimed_at__lt=now - self.stale_claim_after)
        )

    def due_records(self, *, batch_size: Optional[int] = None):
        """Records the next sweep would claim, oldest deadline first."""
        limit = batch_size or self.sweep_batch_size
        return (
            DeletionRecord.objects
            .filter(self._due_filter(self.clock()))
            .select_related('user')
            .order_by('scheduled_for', 'id')[:limit]
        )

    def sweep_expired(self, *, batch_size: Optional[int] = None) -> SweepSummary:
        """
        Execute deletions whose grace period has passed.

        Safe to run from several workers at once: a record is purged only
        by the worker whose claim update changed it.
        """
        summary = SweepSummary()
        for record_id in self._claim_due_records(batch_size=batch_size or self.sweep_batch_size):
            summary.claimed.append(record_id)
            if self._execute(record_id=record_id):
                summary.executed.append(record_id)
            else:
                summary.failed.append(record_id)

        if summary.claimed:
            logger.info(
                "Deletion sweep: %d claimed, %d executed, %d failed",
                len(summary.claimed), len(summary.executed), len(summary.failed),
            )
        return summary

    def _claim_due_records(self, *, batch_size: int) -> List[UUID]:
        now = self.clock()
        candidates = list(
            DeletionRecord.objects
            .filter(self._due_filter(now))
            .order_by('scheduled_for', 'id')
            .values_list('id', 'status', 'claimed_at')[:batch_size]
        )

        claimed = []
        for record_id, status, claimed_at in candidates:
            queryset = DeletionRecord.objects.filter(id=record_id, status=status)
            if status == DeletionStatus.SCHEDULED:
                queryset = queryset.filter(scheduled_for__lte=now)
            else:
                # Stale claim; only the worker that sees the same claim wins
                queryset = queryset.filter(claimed_at=claimed_at)

            updated = queryset.update(status=DeletionStatus.EXECUTING, claimed_at=now, updated_at=now)
            if updated == 1:
                claimed.append(record_id)
        return claimed

    def _execute(self, *, record_id: UUID) -> bool:
        record = DeletionRecord.objects.select_related('user').get(id=record_id)
        user = record.user

        try:
            result = self.purger.purge(record=record)
        except Exception as e:
            logger.exception("Purge of deletion record %s failed", record_id)
            self.auditor.record_best_effort(
                user=user,
                activity_type=ActivityType.DELETION_FAILED,
                description="Account deletion failed",
                outcome=ActivityOutcome.FAILURE,
                metadata={'deletion_record_id': str(record_id), 'error': str(e)},
            )
            return False

        self._cancel_external(user=user, subscriptions=result.closed_subscriptions)
        self._notify(
            user=user,
            template='account_deletion_executed',
            metadata={
                'recipient_email': result.recipient_email,
                'display_name': result.display_name,
                'executed_at': result.record.executed_at,
            },
        )
        return True
