"""
Deletion scheduler.

Keeps at most one active (scheduled or executing) deletion record per
user. The partial unique constraint on DeletionRecord enforces this in
the database; the scheduler turns a repeated request into a refresh of
the existing record instead of a duplicate.
"""

from datetime import timedelta
from typing import Callable, Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.lifecycle.models import ACTIVE_DELETION_STATUSES, DeletionRecord, DeletionStatus

from .exceptions import DeletionAlreadyExecutingError


class DeletionScheduler:
    """Creates or refreshes a user's scheduled deletion record."""

    def __init__(self, *, grace_period: timedelta, clock: Callable = timezone.now):
        self.grace_period = grace_period
        self.clock = clock

    def get_active_record(self, *, user: User, for_update: bool = False) -> Optional[DeletionRecord]:
        queryset = DeletionRecord.objects.filter(user=user, status__in=ACTIVE_DELETION_STATUSES)
        if for_update:
            queryset = queryset.select_for_update()
        return queryset.first()

    @transaction.atomic
    def schedule(self, *, user: User, reason: str = '') -> Tuple[DeletionRecord, bool]:
        """
        Schedule the user's account for deletion after the grace period.

        A second request while a record is scheduled moves its deadline to
        ``now + grace_period`` and replaces the reason; ``requested_at``
        keeps the time of the first request.

        Args:
            user: User to schedule
            reason: Optional free-text reason

        Returns:
            Tuple of (record, created)

        Raises:
            DeletionAlreadyExecutingError: If the sweep is already purging the account
        """
        now = self.clock()
        scheduled_for = now + self.grace_period

        record = self.get_active_record(user=user, for_update=True)
        if record is None:
            try:
                with transaction.atomic():
                    record = DeletionRecord.objects.create(
                        user=user,
                        scheduled_for=scheduled_for,
                        reason=reason,
                        status=DeletionStatus.SCHEDULED,
                        requested_at=now,
                    )
                return record, True
            except IntegrityError:
                # A concurrent request inserted the active record first
                record = self.get_active_record(user=user, for_update=True)
                if record is None:
                    raise

        if record.status == DeletionStatus.EXECUTING:
            raise DeletionAlreadyExecutingError("Account deletion is already in progress")

        record.scheduled_for = scheduled_for
        record.reason = reason
        record.save(update_fields=['scheduled_for', 'reason', 'updated_at'])
        return record, False
