"""
Tests for the notifier and auditor.
"""

import pytest
from unittest.mock import patch
from django.db import DatabaseError

from apps.analytics.models import AnalyticsEvent
from apps.lifecycle.models import ActivityOutcome, ActivityRecord, ActivityType
from apps.lifecycle.services import Auditor, EmailNotificationChannel, Notifier

from .fakes import FailingChannel, RecordingChannel


@pytest.mark.django_db
class TestNotifier:

    def test_notify_success(self, user):
        channel = RecordingChannel()

        assert Notifier(channel=channel).notify(user_id=user.id, template='t', metadata={'a': 1}) is True
        assert channel.sent == [(user.id, 't', {'a': 1})]

    def test_notify_failure_is_swallowed(self, user):
        assert Notifier(channel=FailingChannel()).notify(user_id=user.id, template='t', metadata={}) is False


@pytest.mark.django_db
class TestEmailNotificationChannel:

    def test_renders_templates(self, user, mailoutbox):
        EmailNotificationChannel(from_email='lifecycle@example.com').send(
            user_id=user.id,
            template='account_deletion_recovered',
            metadata={'days_remaining': 12},
        )

        assert len(mailoutbox) == 1
        message = mailoutbox[0]
        assert message.from_email == 'lifecycle@example.com'
        assert message.to == ['departing@example.com']
        assert message.subject == 'Your account has been recovered'
        assert 'Hi Departing User' in message.body

    def test_recipient_override(self, user, mailoutbox):
        EmailNotificationChannel().send(
            user_id=user.id,
            template='account_deletion_executed',
            metadata={'recipient_email': 'previous@example.com', 'executed_at': 'today'},
        )

        assert mailoutbox[0].to == ['previous@example.com']


@pytest.mark.django_db
class TestAuditor:

    def test_record(self, auditor, user):
        record = auditor.record(
            user=user,
            activity_type=ActivityType.DELETION_SCHEDULED,
            description='Scheduled',
            metadata={'k': 'v'},
        )

        assert record.outcome == ActivityOutcome.SUCCESS
        assert record.metadata == {'k': 'v'}

    def test_records_are_append_only(self, auditor, user):
        record = auditor.record(user=user, activity_type=ActivityType.DELETION_SCHEDULED, description='Scheduled')

        record.description = 'Changed'
        with pytest.raises(ValueError):
            record.save()
        with pytest.raises(ValueError):
            record.delete()

        assert ActivityRecord.objects.get(id=record.id).description == 'Scheduled'

    def test_record_best_effort_swallows_database_errors(self, auditor, user):
        with patch.object(ActivityRecord.objects, 'create', side_effect=DatabaseError("down")):
            result = auditor.record_best_effort(
                user=user,
                activity_type=ActivityType.EXPORT_FAILED,
                description='Export failed',
            )

        assert result is None

    def test_track_event(self, auditor, user):
        auditor.track_event(user=user, event_type='account_deletion_scheduled', event_data={'x': 1})

        event = AnalyticsEvent.objects.get(user=user)
        assert event.event_data == {'x': 1}

    def test_track_event_swallows_database_errors(self, auditor, user):
        with patch.object(AnalyticsEvent.objects, 'create', side_effect=DatabaseError("down")):
            auditor.track_event(user=user, event_type='x', event_data={})

        assert not AnalyticsEvent.objects.filter(user=user).exists()
