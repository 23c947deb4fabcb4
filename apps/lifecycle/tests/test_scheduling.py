"""
Tests for the deletion scheduler.

Tests cover:
- Grace period computation
- Re-request refreshes the active record instead of duplicating it
- The database constraint behind the single-active-record rule
"""

import pytest
from datetime import timedelta
from django.db import IntegrityError, transaction

from apps.lifecycle.models import DeletionRecord, DeletionStatus
from apps.lifecycle.services import DeletionScheduler, DeletionAlreadyExecutingError

from .fakes import T0


@pytest.fixture
def scheduler(clock):
    return DeletionScheduler(grace_period=timedelta(days=30), clock=clock)


@pytest.mark.django_db
class TestDeletionScheduler:

    def test_schedule_creates_record(self, scheduler, user):
        record, created = scheduler.schedule(user=user, reason='Moving on')

        assert created is True
        assert record.status == DeletionStatus.SCHEDULED
        assert record.scheduled_for == T0 + timedelta(days=30)
        assert record.requested_at == T0
        assert record.reason == 'Moving on'

    def test_rerequest_refreshes_existing_record(self, scheduler, clock, user):
        first, _ = scheduler.schedule(user=user, reason='First')
        clock.advance(days=5)

        second, created = scheduler.schedule(user=user, reason='Second')

        assert created is False
        assert second.id == first.id
        assert second.scheduled_for == T0 + timedelta(days=35)
        assert second.reason == 'Second'
        assert second.requested_at == T0
        assert DeletionRecord.objects.filter(user=user).count() == 1

    def test_rerequest_while_executing_rejected(self, scheduler, user):
        record, _ = scheduler.schedule(user=user)
        DeletionRecord.objects.filter(id=record.id).update(status=DeletionStatus.EXECUTING)

        with pytest.raises(DeletionAlreadyExecutingError):
            scheduler.schedule(user=user, reason='Again')

        record.refresh_from_db()
        assert record.reason == ''
        assert record.scheduled_for == T0 + timedelta(days=30)

    def test_schedule_after_cancellation_creates_new_record(self, scheduler, user):
        first, _ = scheduler.schedule(user=user)
        DeletionRecord.objects.filter(id=first.id).update(status=DeletionStatus.CANCELLED)

        second, created = scheduler.schedule(user=user)

        assert created is True
        assert second.id != first.id
        assert DeletionRecord.objects.filter(user=user).count() == 2

    def test_get_active_record(self, scheduler, user):
        assert scheduler.get_active_record(user=user) is None

        record, _ = scheduler.schedule(user=user)

        assert scheduler.get_active_record(user=user) == record

    def test_database_rejects_second_active_record(self, user):
        DeletionRecord.objects.create(user=user, scheduled_for=T0, requested_at=T0)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                DeletionRecord.objects.create(
                    user=user,
                    scheduled_for=T0,
                    requested_at=T0,
                    status=DeletionStatus.EXECUTING,
                )

    def test_database_allows_many_inactive_records(self, user):
        for status in (DeletionStatus.CANCELLED, DeletionStatus.CANCELLED, DeletionStatus.EXECUTED):
            DeletionRecord.objects.create(user=user, scheduled_for=T0, requested_at=T0, status=status)
        DeletionRecord.objects.create(user=user, scheduled_for=T0, requested_at=T0)

        assert DeletionRecord.objects.filter(user=user).count() == 4
