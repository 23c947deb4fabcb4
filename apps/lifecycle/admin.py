# ==========================================
# apps/lifecycle/admin.py
# ==========================================

from django.contrib import admin
from apps.lifecycle.models import ActivityRecord, DataExport, DeletionRecord


@admin.register(DeletionRecord)
class DeletionRecordAdmin(admin.ModelAdmin):
    """
    Admin interface for deletion records.

    Read-only: transitions go through the lifecycle services so every
    change is audited.
    """

    list_display = ['user', 'status', 'scheduled_for', 'requested_at', 'cancelled_at', 'executed_at']
    list_filter = ['status']
    search_fields = ['user__email', 'reason']
    date_hierarchy = 'scheduled_for'
    ordering = ['-requested_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ActivityRecord)
class ActivityRecordAdmin(admin.ModelAdmin):
    """Admin interface for the append-only audit trail."""

    list_display = ['user', 'activity_type', 'outcome', 'description', 'created_at']
    list_filter = ['activity_type', 'outcome']
    search_fields = ['user__email', 'description']
    ordering = ['-created_at']

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('user')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(DataExport)
class DataExportAdmin(admin.ModelAdmin):
    list_display = ['user', 'export_version', 'created_at', 'expires_at']
    search_fields = ['user__email']
    exclude = ['payload']
    ordering = ['-created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
