# ==========================================
# apps/organizations/admin.py
# ==========================================

from django.contrib import admin
from apps.organizations.models import Organization, OrganizationMembership


class OrganizationMembershipInline(admin.TabularInline):
    """Inline admin for organization memberships."""
    model = OrganizationMembership
    extra = 0
    fields = ['user', 'role', 'joined_at']
    readonly_fields = ['joined_at']


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """Admin interface for Organizations."""

    list_display = ['name', 'owner_email', 'member_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'description', 'memberships__user__email']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [OrganizationMembershipInline]
    date_hierarchy = 'created_at'
    ordering = ['-created_at']

    def owner_email(self, obj):
        """Show the current owner's e-mail."""
        membership = obj.get_owner_membership()
        return membership.user.email if membership else '-'
    owner_email.short_description = 'Owner'

    def member_count(self, obj):
        """Show number of members."""
        return obj.memberships.count()
    member_count.short_description = 'Members'


@admin.register(OrganizationMembership)
class OrganizationMembershipAdmin(admin.ModelAdmin):
    """Admin interface for Organization Memberships."""

    list_display = ['user', 'organization', 'role', 'joined_at']
    list_filter = ['role', 'joined_at']
    search_fields = ['user__email', 'organization__name']
    readonly_fields = ['joined_at']
    date_hierarchy = 'joined_at'
    ordering = ['-joined_at']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('user', 'organization')
