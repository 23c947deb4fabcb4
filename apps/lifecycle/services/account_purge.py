"""
Account purge.

The irreversible step run by the sweep once a deletion's grace period has
passed. Every sub-step is idempotent, so a purge that crashed half-way can
simply be run again for the same record.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from django.db import transaction
from django.utils import timezone

from apps.accounts.services import anonymize_user_account, get_user
from apps.analytics.models import AnalyticsEvent, ReportHistory, ScheduledReport
from apps.billing.models import Subscription
from apps.contracts.models import Contract
from apps.lifecycle.models import ActivityType, DataExport, DeletionRecord, DeletionStatus

from .notifications import Auditor
from .organization_disposition import DispositionOutcome, OrganizationDispositionResolver
from .subscription_termination import SubscriptionTerminator

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    record: DeletionRecord
    recipient_email: str
    display_name: str
    closed_subscriptions: List[Subscription] = field(default_factory=list)
    dispositions: List[DispositionOutcome] = field(default_factory=list)
    deleted: Dict[str, int] = field(default_factory=dict)


class AccountPurger:
    """Removes a user's data and anonymizes the account."""

    def __init__(
        self,
        *,
        disposition_resolver: OrganizationDispositionResolver,
        subscription_terminator: SubscriptionTerminator,
        auditor: Auditor,
        clock: Callable = timezone.now
    ):
        self.disposition_resolver = disposition_resolver
        self.subscription_terminator = subscription_terminator
        self.auditor = auditor
        self.clock = clock

    @transaction.atomic
    def purge(self, *, record: DeletionRecord) -> PurgeResult:
        """
        Purge the account behind a claimed deletion record.

        Organizations joined and subscriptions opened during the grace
        period are resolved again here. The user row itself is kept in
        anonymized form so the deletion history and audit trail stay
        attached to it.

        Args:
            record: Record in ``executing`` status

        Returns:
            PurgeResult with what was removed and the pre-anonymization
            contact details
        """
        user = get_user(user_id=record.user_id, for_update=True)
        recipient_email = user.email
        display_name = user.get_display_name()

        dispositions = self.disposition_resolver.resolve_all(user=user)
        closed = self.subscription_terminator.close_local(user=user)

        deleted = {
            'contracts': Contract.objects.filter(user=user).delete()[0],
            'analytics_events': AnalyticsEvent.objects.filter(user=user).delete()[0],
            'scheduled_reports': ScheduledReport.objects.filter(user=user).delete()[0],
            'report_history': ReportHistory.objects.filter(user=user).delete()[0],
            'data_exports': DataExport.objects.filter(user=user).delete()[0],
        }

        anonymize_user_account(user=user)

        now = self.clock()
        record.status = DeletionStatus.EXECUTED
        record.executed_at = now
        record.save(update_fields=['status', 'executed_at', 'updated_at'])

        self.auditor.record(
            user=user,
            activity_type=ActivityType.DELETION_EXECUTED,
            description="Account deleted",
            metadata={
                'deletion_record_id': str(record.id),
                'deleted': deleted,
                'organizations_resolved': len(dispositions),
                'subscriptions_closed': len(closed),
            },
        )
        logger.info("Purged account %s (record %s): %s", user.id, record.id, deleted)

        return PurgeResult(
            record=record,
            recipient_email=recipient_email,
            display_name=display_name,
            closed_subscriptions=closed,
            dispositions=dispositions,
            deleted=deleted,
        )
