"""
Recovery gate.

Answers whether an account can still be recovered and performs the
recovery (cancel) transition. Recovery restores account access only:
organization dispositions and subscription cancellations made when the
deletion was requested are not undone.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.lifecycle.models import DeletionRecord, DeletionStatus

from .exceptions import AccountNotRecoverableError, DeletionNotScheduledError

DEFAULT_RECOVERY_REASON = 'User requested recovery'

SECONDS_PER_DAY = 86400


def days_until(scheduled_for: datetime, now: datetime) -> int:
    """Whole days left until scheduled_for, rounded up; zero or negative once due."""
    return math.ceil((scheduled_for - now).total_seconds() / SECONDS_PER_DAY)


@dataclass(frozen=True)
class DeletionStatusView:
    is_scheduled_for_deletion: bool
    deletion_date: Optional[datetime] = None
    days_remaining: Optional[int] = None
    reason: Optional[str] = None
    status: Optional[str] = None
    can_recover: bool = False


NOT_SCHEDULED = DeletionStatusView(is_scheduled_for_deletion=False)


class RecoveryGate:
    """Reads deletion status and cancels scheduled deletions."""

    def __init__(self, *, clock: Callable = timezone.now):
        self.clock = clock

    def latest_record(self, *, user: User, for_update: bool = False) -> Optional[DeletionRecord]:
        queryset = DeletionRecord.objects.filter(user=user)
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.order_by('-requested_at', '-id').first()

    def get_status(self, *, user: User) -> DeletionStatusView:
        """
        Describe the user's most recent deletion record.

        ``can_recover`` is true only while the record is scheduled and its
        deadline has not been reached.
        """
        record = self.latest_record(user=user)
        if record is None:
            return NOT_SCHEDULED

        remaining = days_until(record.scheduled_for, self.clock())
        return DeletionStatusView(
            is_scheduled_for_deletion=record.status in (DeletionStatus.SCHEDULED, DeletionStatus.EXECUTING),
            deletion_date=record.scheduled_for,
            days_remaining=max(0, remaining),
            reason=record.reason,
            status=record.status,
            can_recover=record.status == DeletionStatus.SCHEDULED and remaining > 0,
        )

    @transaction.atomic
    def recover(self, *, user: User, reason: str = '') -> DeletionRecord:
        """
        Cancel the user's scheduled deletion.

        Args:
            user: User recovering their account
            reason: Optional reason stored on the record

        Returns:
            The cancelled DeletionRecord

        Raises:
            DeletionNotScheduledError: If the user never requested deletion
            AccountNotRecoverableError: If the latest record is cancelled,
                executing, executed, or past its deadline
        """
        record = self.latest_record(user=user, for_update=True)
        if record is None:
            raise DeletionNotScheduledError("Account is not scheduled for deletion")

        if record.status == DeletionStatus.CANCELLED:
            raise AccountNotRecoverableError("Account deletion was already cancelled", reason='cancelled')
        if record.status == DeletionStatus.EXECUTED:
            raise AccountNotRecoverableError("Account has already been deleted", reason='executed')
        if record.status == DeletionStatus.EXECUTING:
            raise AccountNotRecoverableError("Account deletion is in progress", reason='executing')

        now = self.clock()
        if days_until(record.scheduled_for, now) <= 0:
            raise AccountNotRecoverableError("Recovery period has expired", reason='expired')

        record.status = DeletionStatus.CANCELLED
        record.cancelled_at = now
        record.cancelled_reason = reason or DEFAULT_RECOVERY_REASON
        record.save(update_fields=['status', 'cancelled_at', 'cancelled_reason', 'updated_at'])
        return record
