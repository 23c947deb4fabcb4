"""
Organization disposition resolver.

Decides, for every organization a departing user belongs to, whether the
membership is simply removed, ownership is handed to a successor, or the
organization is dissolved. Each organization is handled atomically under
a row lock on the organization, so two owners leaving at the same time
cannot both see "no other members" or both promote the same successor.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Case, IntegerField, Value, When

from apps.accounts.models import User
from apps.organizations.models import Organization, OrganizationMembership, OrganizationRole
from apps.lifecycle.models import ActivityType

from .notifications import Auditor

logger = logging.getLogger(__name__)


class Disposition:
    MEMBERSHIP_REMOVED = 'membership_removed'
    OWNERSHIP_TRANSFERRED = 'ownership_transferred'
    DISSOLVED = 'dissolved'
    SKIPPED = 'skipped'


@dataclass(frozen=True)
class DispositionOutcome:
    organization_id: UUID
    organization_name: str
    disposition: str
    successor_id: Optional[UUID] = None


# Successor priority: an existing co-owner needs no promotion
_SUCCESSOR_PRIORITY = Case(
    When(role=OrganizationRole.OWNER, then=Value(0)),
    When(role=OrganizationRole.ADMIN, then=Value(1)),
    default=Value(2),
    output_field=IntegerField(),
)


class OrganizationDispositionResolver:
    """Applies the departure policy to every organization of a user."""

    def __init__(self, *, auditor: Auditor):
        self.auditor = auditor

    def resolve_all(self, *, user: User) -> List[DispositionOutcome]:
        """
        Resolve every organization the user belongs to.

        Must run inside the caller's transaction; each organization gets
        its own savepoint. Organizations are locked in id order.
        """
        organization_ids = list(
            OrganizationMembership.objects
            .filter(user=user)
            .order_by('organization_id')
            .values_list('organization_id', flat=True)
        )
        return [
            self.resolve(user=user, organization_id=organization_id)
            for organization_id in organization_ids
        ]

    @transaction.atomic
    def resolve(self, *, user: User, organization_id: UUID) -> DispositionOutcome:
        """
        Resolve one organization.

        Args:
            user: Departing user
            organization_id: Organization to resolve

        Returns:
            DispositionOutcome describing what happened
        """
        try:
            organization = Organization.objects.select_for_update().get(id=organization_id)
        except Organization.DoesNotExist:
            # Dissolved by a concurrent disposition
            return DispositionOutcome(organization_id, '', Disposition.SKIPPED)

        memberships = list(
            OrganizationMembership.objects
            .select_for_update()
            .filter(organization=organization)
            .order_by('joined_at', 'id')
        )
        departing = next((m for m in memberships if m.user_id == user.id), None)
        if departing is None:
            return DispositionOutcome(organization.id, organization.name, Disposition.SKIPPED)

        if departing.role != OrganizationRole.OWNER:
            departing.delete()
            self.auditor.record(
                user=user,
                activity_type=ActivityType.MEMBERSHIP_REMOVED,
                description=f"Left organization {organization.name}",
                metadata={'organization_id': str(organization.id), 'role': departing.role},
            )
            return DispositionOutcome(organization.id, organization.name, Disposition.MEMBERSHIP_REMOVED)

        successor = self._pick_successor(organization=organization, departing=departing)
        if successor is None:
            name = organization.name
            organization.delete()
            logger.info("Dissolved organization %s after sole owner %s left", organization_id, user.id)
            self.auditor.record(
                user=user,
                activity_type=ActivityType.ORGANIZATION_DISSOLVED,
                description=f"Dissolved organization {name}",
                metadata={'organization_id': str(organization_id), 'organization_name': name},
            )
            return DispositionOutcome(organization_id, name, Disposition.DISSOLVED)

        previous_role = successor.role
        if successor.role != OrganizationRole.OWNER:
            successor.role = OrganizationRole.OWNER
            successor.save(update_fields=['role'])
        departing.delete()

        logger.info(
            "Transferred ownership of organization %s from %s to %s",
            organization.id, user.id, successor.user_id,
        )
        self.auditor.record(
            user=user,
            activity_type=ActivityType.OWNERSHIP_TRANSFERRED,
            description=f"Transferred ownership of {organization.name}",
            metadata={
                'organization_id': str(organization.id),
                'successor_id': str(successor.user_id),
                'successor_previous_role': previous_role,
            },
        )
        return DispositionOutcome(
            organization.id,
            organization.name,
            Disposition.OWNERSHIP_TRANSFERRED,
            successor_id=successor.user_id,
        )

    def _pick_successor(self, *, organization, departing) -> Optional[OrganizationMembership]:
        """Owner first, then admin, then member; oldest membership wins ties."""
        return (
            OrganizationMembership.objects
            .filter(organization=organization)
            .exclude(id=departing.id)
            .annotate(priority=_SUCCESSOR_PRIORITY)
            .order_by('priority', 'joined_at', 'id')
            .first()
        )
