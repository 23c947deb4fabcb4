import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.billing.models import Subscription, SubscriptionStatus
from apps.organizations.models import Organization, OrganizationMembership, OrganizationRole
from apps.lifecycle.services import Auditor, build_lifecycle_manager

from .fakes import PASSWORD, FixedClock, RecordingBillingProvider


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def billing_provider():
    return RecordingBillingProvider()


@pytest.fixture
def auditor():
    return Auditor()


@pytest.fixture
def manager(clock, billing_provider):
    """Lifecycle manager with real e-mail delivery (locmem in tests) and a fixed clock."""
    return build_lifecycle_manager(billing_provider=billing_provider, clock=clock)


@pytest.fixture
def user(db):
    """Create and return the departing user."""
    return User.objects.create_user(
        email='departing@example.com',
        password=PASSWORD,
        display_name='Departing User',
        preferences={
            'notifications': {'email': True, 'push': False},
            'email': {'digest': 'weekly'},
            'api_token': 'should-never-be-exported',
        },
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email='admin@example.com',
        password=PASSWORD,
        display_name='Org Admin',
    )


@pytest.fixture
def member_user(db):
    return User.objects.create_user(
        email='member@example.com',
        password=PASSWORD,
        display_name='Org Member',
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        email='other@example.com',
        password=PASSWORD,
        display_name='Other User',
    )


@pytest.fixture
def make_organization(db):
    """Factory: make_organization(owner, [(user, role), ...], name=...)."""

    def _make(owner, members=(), name='Acme'):
        organization = Organization.objects.create(name=name, description=f'{name} team')
        OrganizationMembership.objects.create(
            user=owner,
            organization=organization,
            role=OrganizationRole.OWNER,
        )
        for member, role in members:
            OrganizationMembership.objects.create(user=member, organization=organization, role=role)
        return organization

    return _make


@pytest.fixture
def make_subscription(db):

    def _make(user, status=SubscriptionStatus.ACTIVE, external_reference='sub_123', plan='pro'):
        return Subscription.objects.create(
            user=user,
            status=status,
            external_reference=external_reference,
            plan=plan,
        )

    return _make


@pytest.fixture
def authenticated_client(api_client, user):
    """Return API client authenticated as the departing user."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
