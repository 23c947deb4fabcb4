from django.contrib import admin
from apps.contracts.models import Contract, AnalysisResult


class AnalysisResultInline(admin.TabularInline):
    model = AnalysisResult
    extra = 0
    fields = ['status', 'created_at', 'completed_at']
    readonly_fields = ['created_at']


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    """Admin interface for Contracts."""

    list_display = ['file_name', 'user', 'contract_type', 'status', 'created_at']
    list_filter = ['status', 'contract_type']
    search_fields = ['file_name', 'user__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [AnalysisResultInline]
    ordering = ['-created_at']
