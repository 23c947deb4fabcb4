import pytest
from django.db import IntegrityError, transaction

from apps.accounts.models import User
from apps.organizations.models import Organization, OrganizationMembership, OrganizationRole


@pytest.fixture
def owner(db):
    return User.objects.create_user(email='owner@example.com', password='TestPass123!')


@pytest.fixture
def member(db):
    return User.objects.create_user(email='member@example.com', password='TestPass123!')


@pytest.fixture
def organization(owner):
    organization = Organization.objects.create(name='Acme')
    OrganizationMembership.objects.create(user=owner, organization=organization, role=OrganizationRole.OWNER)
    return organization


@pytest.mark.django_db
class TestOrganization:

    def test_membership_helpers(self, organization, owner, member):
        assert organization.has_member(owner)
        assert not organization.has_member(member)
        assert organization.get_user_role(owner) == OrganizationRole.OWNER
        assert organization.get_user_role(member) is None
        assert organization.get_owner_membership().user == owner

    def test_duplicate_membership_rejected(self, organization, owner):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                OrganizationMembership.objects.create(user=owner, organization=organization)

    def test_delete_cascades_memberships(self, organization):
        organization_id = organization.id

        organization.delete()

        assert not OrganizationMembership.objects.filter(organization_id=organization_id).exists()
