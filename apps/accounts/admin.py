# ==========================================
# apps/accounts/admin.py
# ==========================================

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User
from .services import anonymize_user_account


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for User model.

    Deletion requests normally go through the lifecycle sweep; the
    anonymize action exists for manual data-protection requests.
    """

    list_display = [
        'email',
        'display_name',
        'is_active_badge',
        'anonymized_badge',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'is_superuser',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Preferences', {
            'fields': ('preferences',),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'last_login'),
            'classes': ('collapse',),
        }),
        ('GDPR', {
            'fields': ('gdpr_deleted_at',),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
    )

    readonly_fields = [
        'created_at',
        'updated_at',
        'last_login',
        'gdpr_deleted_at',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def is_active_badge(self, obj):
        """Display active status as colored badge."""
        if obj.is_active:
            return format_html(
                '<span style="background: #6B8E5E; color: white; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Active</span>'
            )
        return format_html(
            '<span style="background: #B85C5C; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">Inactive</span>'
        )
    is_active_badge.short_description = 'Status'
    is_active_badge.admin_order_field = 'is_active'

    def anonymized_badge(self, obj):
        if obj.is_anonymized:
            return format_html(
                '<span style="background: #ccc; color: #666; padding: 3px 8px; '
                'border-radius: 10px; font-size: 11px;">Anonymized</span>'
            )
        return ''
    anonymized_badge.short_description = 'GDPR'
    anonymized_badge.admin_order_field = 'gdpr_deleted_at'

    actions = ['anonymize_users']

    @admin.action(description='GDPR: Anonymize selected users (IRREVERSIBLE)')
    def anonymize_users(self, request, queryset):
        """Anonymize selected users, skipping staff and superusers."""
        safe_queryset = queryset.filter(is_superuser=False, is_staff=False)
        count = 0
        for user in safe_queryset:
            anonymize_user_account(user=user)
            count += 1

        skipped = queryset.count() - count
        msg = f'Anonymized {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} staff/superuser(s) for safety.'
        self.message_user(request, msg)
