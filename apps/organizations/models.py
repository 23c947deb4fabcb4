# ==========================================
# apps/organizations/models.py
# ==========================================

from django.db import models
import uuid


class OrganizationRole(models.TextChoices):
    OWNER = 'owner', 'Owner'
    ADMIN = 'admin', 'Admin'
    MEMBER = 'member', 'Member'


class Organization(models.Model):
    """Organization shared between users; ownership lives on its memberships."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'organizations'
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def has_member(self, user):
        return self.memberships.filter(user=user).exists()

    def get_user_role(self, user):
        try:
            return self.memberships.get(user=user).role
        except OrganizationMembership.DoesNotExist:
            return None

    def get_owner_membership(self):
        return self.memberships.filter(role=OrganizationRole.OWNER).first()


class OrganizationMembership(models.Model):
    """User membership in an organization with role."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='organization_memberships')
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='memberships')
    role = models.CharField(max_length=20, choices=OrganizationRole.choices, default=OrganizationRole.MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'organization_memberships'
        constraints = [
            models.UniqueConstraint(fields=['user', 'organization'], name='unique_membership_per_organization'),
        ]
        indexes = [
            models.Index(fields=['organization', 'role'], name='org_members_org_role_idx'),
            models.Index(fields=['user', 'joined_at'], name='org_members_user_joined_idx'),
        ]
        ordering = ['joined_at']

    def __str__(self):
        return f"{self.user.get_display_name()} in {self.organization.name} ({self.role})"
