"""
Notifier and auditor.

Every lifecycle transition appends one ActivityRecord and attempts one
user notification. Audit writes made inside a core transaction propagate
their errors (the transition must not commit without its record); writes
and notifications made after the commit are best-effort and only logged.
"""

import logging
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import DatabaseError, transaction
from django.template.loader import render_to_string

from apps.analytics.models import AnalyticsEvent
from apps.lifecycle.models import ActivityOutcome, ActivityRecord

logger = logging.getLogger(__name__)

User = get_user_model()


class NotificationChannel:
    """Interface for user-facing notification transports."""

    def send(self, *, user_id: UUID, template: str, metadata: dict) -> None:
        raise NotImplementedError


class EmailNotificationChannel(NotificationChannel):
    """
    Delivers lifecycle notifications through Django's e-mail framework.

    Templates live under ``lifecycle/emails/``: ``<template>_subject.txt``
    and ``<template>.txt``. ``metadata['recipient_email']`` overrides the
    user's current address (the account may already be anonymized).
    """

    def __init__(self, *, from_email: Optional[str] = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send(self, *, user_id: UUID, template: str, metadata: dict) -> None:
        user = User.objects.get(id=user_id)
        recipient = metadata.get('recipient_email') or user.email

        context = {
            'display_name': user.get_display_name(),
            **metadata,
        }
        subject = render_to_string(f'lifecycle/emails/{template}_subject.txt', context).strip()
        body = render_to_string(f'lifecycle/emails/{template}.txt', context)

        send_mail(subject, body, self.from_email, [recipient], fail_silently=False)


class Notifier:
    """Best-effort notification sender."""

    def __init__(self, *, channel: NotificationChannel):
        self.channel = channel

    def notify(self, *, user_id: UUID, template: str, metadata: dict) -> bool:
        """
        Send one notification.

        Returns:
            True if the channel accepted the message, False otherwise
        """
        try:
            self.channel.send(user_id=user_id, template=template, metadata=metadata)
        except Exception:
            logger.exception("Notification %s for user %s failed", template, user_id)
            return False
        return True


class Auditor:
    """Appends activity records and analytics events."""

    def record(
        self,
        *,
        user,
        activity_type: str,
        description: str,
        outcome: str = ActivityOutcome.SUCCESS,
        metadata: Optional[dict] = None
    ) -> ActivityRecord:
        return ActivityRecord.objects.create(
            user=user,
            activity_type=activity_type,
            description=description,
            outcome=outcome,
            metadata=metadata or {},
        )

    def record_best_effort(self, **kwargs) -> Optional[ActivityRecord]:
        """Like record(), but a failed write is logged instead of raised."""
        try:
            with transaction.atomic():
                return self.record(**kwargs)
        except DatabaseError:
            logger.exception("Could not write %s activity record", kwargs.get('activity_type'))
            return None

    def track_event(self, *, user, event_type: str, event_data: dict) -> None:
        try:
            with transaction.atomic():
                AnalyticsEvent.objects.create(user=user, event_type=event_type, event_data=event_data)
        except DatabaseError:
            logger.exception("Could not write %s analytics event", event_type)
