# ==========================================
# apps/analytics/models.py
# ==========================================

from django.db import models
import uuid


class AnalyticsEvent(models.Model):
    """Product analytics event attributed to a user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='analytics_events')
    event_type = models.CharField(max_length=100, db_index=True)
    event_data = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'analytics_events'
        indexes = [
            models.Index(fields=['user', 'timestamp'], name='analytics_user_ts_idx'),
        ]
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.event_type} @ {self.timestamp}"


class ScheduledReport(models.Model):
    """Recurring report a user has configured."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='scheduled_reports')
    name = models.CharField(max_length=200)
    frequency = models.CharField(max_length=20)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'scheduled_reports'
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class ReportHistory(models.Model):
    """One generated report."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='report_history')
    report_name = models.CharField(max_length=200)
    template = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, default='completed')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'report_history'
        ordering = ['-created_at']
        verbose_name_plural = 'report history'

    def __str__(self):
        return f"{self.report_name} ({self.status})"
