# ==========================================
# apps/analytics/admin.py
# ==========================================

from django.contrib import admin
from apps.analytics.models import AnalyticsEvent, ScheduledReport, ReportHistory


@admin.register(AnalyticsEvent)
class AnalyticsEventAdmin(admin.ModelAdmin):
    list_display = ['event_type', 'user', 'timestamp']
    list_filter = ['event_type']
    search_fields = ['event_type', 'user__email']
    readonly_fields = ['timestamp']
    ordering = ['-timestamp']


@admin.register(ScheduledReport)
class ScheduledReportAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'frequency', 'created_at']
    search_fields = ['name', 'user__email']
    ordering = ['-created_at']


@admin.register(ReportHistory)
class ReportHistoryAdmin(admin.ModelAdmin):
    list_display = ['report_name', 'user', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['report_name', 'user__email']
    ordering = ['-created_at']
