# ==========================================
# apps/billing/admin.py
# ==========================================

from django.contrib import admin
from apps.billing.models import Subscription


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    """Admin interface for Subscriptions."""

    list_display = ['user', 'external_reference', 'plan', 'status', 'canceled_at', 'created_at']
    list_filter = ['status', 'plan']
    search_fields = ['user__email', 'external_reference']
    readonly_fields = ['created_at', 'updated_at', 'canceled_at', 'external_cancel_error']
    ordering = ['-created_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user')
