"""
Export snapshot builder.

Produces a redacted, point-in-time copy of everything a user owns. All
reads happen inside one read-only transaction so a row written while the
export runs is either fully included or fully excluded.
"""

from contextlib import contextmanager
from typing import Callable
from uuid import UUID

from django.db import connection, transaction
from django.db.models import Prefetch
from django.utils import timezone

from apps.accounts.services import get_user
from apps.analytics.models import AnalyticsEvent, ReportHistory, ScheduledReport
from apps.contracts.models import AnalysisResult, Contract
from apps.organizations.models import OrganizationMembership
from apps.lifecycle.models import ActivityRecord
from apps.lifecycle.redaction import redact
from apps.lifecycle.serializers import (
    ExportActivitySerializer,
    ExportAnalyticsEventSerializer,
    ExportContractSerializer,
    ExportMembershipSerializer,
    ExportReportHistorySerializer,
    ExportScheduledReportSerializer,
    ExportUserSerializer,
)

EXPORT_VERSION = '1.0'


@contextmanager
def _snapshot_transaction():
    """
    Open a consistent read-only transaction.

    On PostgreSQL the outermost block is switched to REPEATABLE READ so
    every query sees the same snapshot. Nested calls (and SQLite, which
    serializes writers anyway) reuse the surrounding transaction.
    """
    outermost = not connection.in_atomic_block
    with transaction.atomic():
        if outermost and connection.vendor == 'postgresql':
            with connection.cursor() as cursor:
                cursor.execute('SET TRANSACTION ISOLATION LEVEL REPEATABLE READ READ ONLY')
        yield


class ExportSnapshotBuilder:
    """Builds the export payload for one user."""

    def __init__(self, *, activity_limit: int = 1000, clock: Callable = timezone.now):
        self.activity_limit = activity_limit
        self.clock = clock

    def build(self, *, user_id: UUID) -> dict:
        """
        Build an export snapshot.

        Args:
            user_id: Owner of the data

        Returns:
            JSON-ready dict with the user's contracts, organizations,
            activity, analytics, settings and reports

        Raises:
            UserNotFoundError: If the user does not exist
            DatabaseError: If any read fails (the caller decides whether
                that is fatal)
        """
        with _snapshot_transaction():
            user = get_user(user_id=user_id)

            contracts = (
                Contract.objects
                .filter(user=user)
                .prefetch_related(
                    Prefetch('analysis_results', queryset=AnalysisResult.objects.order_by('created_at'))
                )
                .order_by('created_at')
            )
            memberships = (
                OrganizationMembership.objects
                .filter(user=user)
                .select_related('organization')
                .order_by('joined_at')
            )
            activity = (
                ActivityRecord.objects
                .filter(user=user)
                .order_by('-created_at')[:self.activity_limit]
            )
            events = AnalyticsEvent.objects.filter(user=user).order_by('timestamp')
            scheduled_reports = ScheduledReport.objects.filter(user=user).order_by('created_at')
            report_history = ReportHistory.objects.filter(user=user).order_by('created_at')

            preferences = redact(user.preferences if isinstance(user.preferences, dict) else {})

            snapshot = {
                'user': ExportUserSerializer(user).data,
                'contracts': ExportContractSerializer(contracts, many=True).data,
                'organizations': ExportMembershipSerializer(memberships, many=True).data,
                'activity': ExportActivitySerializer(activity, many=True).data,
                'analytics': ExportAnalyticsEventSerializer(events, many=True).data,
                'settings': {
                    'notifications': preferences.get('notifications', {}),
                    'email': preferences.get('email', {}),
                },
                'reports': {
                    'scheduled': ExportScheduledReportSerializer(scheduled_reports, many=True).data,
                    'history': ExportReportHistorySerializer(report_history, many=True).data,
                },
            }

        snapshot['export_date'] = self.clock().isoformat()
        snapshot['export_version'] = EXPORT_VERSION
        return snapshot
