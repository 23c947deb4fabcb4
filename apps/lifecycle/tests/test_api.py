import pytest
from datetime import timedelta
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from apps.lifecycle.models import DataExport, DeletionRecord, DeletionStatus
from apps.organizations.models import Organization

from .fakes import PASSWORD


REQUEST_URL = '/api/account/deletion/request/'
STATUS_URL = '/api/account/deletion/status/'
RECOVER_URL = '/api/account/deletion/recover/'


def request_payload(**overrides):
    payload = {'password': PASSWORD, 'confirmation': 'DELETE'}
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestRequestDeletionAPI:
    """Tests for POST /api/account/deletion/request/"""

    def test_request_success(self, authenticated_client, user):
        response = authenticated_client.post(REQUEST_URL, request_payload(reason='Bye'), format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['grace_period_days'] == 30
        assert response.data['export_data_included'] is False
        assert response.data['export_id'] is None
        assert response.data['degraded_steps'] == []
        assert response.data['deletion_date']
        assert DeletionRecord.objects.filter(user=user, status=DeletionStatus.SCHEDULED).count() == 1

    def test_request_with_export(self, authenticated_client, user):
        response = authenticated_client.post(REQUEST_URL, request_payload(export_data=True), format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['export_data_included'] is True
        assert DataExport.objects.filter(id=response.data['export_id'], user=user).exists()

    def test_request_wrong_password(self, authenticated_client, user, make_organization):
        organization = make_organization(user)

        response = authenticated_client.post(REQUEST_URL, request_payload(password='nope'), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Password is incorrect'
        assert Organization.objects.filter(id=organization.id).exists()
        assert not DeletionRecord.objects.filter(user=user).exists()

    def test_request_wrong_confirmation(self, authenticated_client, user):
        response = authenticated_client.post(REQUEST_URL, request_payload(confirmation='delete'), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'DELETE' in response.data['error']

    def test_request_missing_fields(self, authenticated_client):
        response = authenticated_client.post(REQUEST_URL, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password' in response.data
        assert 'confirmation' in response.data

    def test_request_while_executing(self, authenticated_client, user):
        DeletionRecord.objects.create(
            user=user,
            scheduled_for=timezone.now(),
            requested_at=timezone.now() - timedelta(days=30),
            status=DeletionStatus.EXECUTING,
        )

        response = authenticated_client.post(REQUEST_URL, request_payload(), format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_request_unauthenticated(self, api_client):
        response = api_client.post(REQUEST_URL, request_payload(), format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestDeletionStatusAPI:
    """Tests for GET /api/account/deletion/status/"""

    def test_status_not_scheduled(self, authenticated_client):
        response = authenticated_client.get(STATUS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'is_scheduled_for_deletion': False,
            'deletion_date': None,
            'days_remaining': None,
            'reason': None,
            'status': None,
            'can_recover': False,
        }

    def test_status_scheduled(self, authenticated_client):
        authenticated_client.post(REQUEST_URL, request_payload(reason='Bye'), format='json')

        response = authenticated_client.get(STATUS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_scheduled_for_deletion'] is True
        assert response.data['days_remaining'] == 30
        assert response.data['reason'] == 'Bye'
        assert response.data['status'] == 'scheduled'
        assert response.data['can_recover'] is True

    def test_status_without_billing_credentials(self, authenticated_client, settings):
        settings.ACCOUNT_LIFECYCLE = {**settings.ACCOUNT_LIFECYCLE, 'BILLING_PROVIDER': 'null', 'STRIPE_SECRET_KEY': ''}

        response = authenticated_client.get(STATUS_URL)

        assert response.status_code == status.HTTP_200_OK

    def test_status_unauthenticated(self, api_client):
        response = api_client.get(STATUS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestRecoverAPI:
    """Tests for POST /api/account/deletion/recover/"""

    def test_recover_success(self, authenticated_client, user):
        authenticated_client.post(REQUEST_URL, request_payload(), format='json')

        response = authenticated_client.post(RECOVER_URL, {'reason': 'Changed my mind'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['days_remaining'] == 30
        record = DeletionRecord.objects.get(user=user)
        assert record.status == DeletionStatus.CANCELLED
        assert record.cancelled_reason == 'Changed my mind'

    def test_recover_not_scheduled(self, authenticated_client):
        response = authenticated_client.post(RECOVER_URL, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_recover_twice(self, authenticated_client):
        authenticated_client.post(REQUEST_URL, request_payload(), format='json')
        authenticated_client.post(RECOVER_URL, {}, format='json')

        response = authenticated_client.post(RECOVER_URL, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['reason'] == 'cancelled'

    def test_recover_expired(self, authenticated_client, user):
        DeletionRecord.objects.create(
            user=user,
            scheduled_for=timezone.now() - timedelta(hours=1),
            requested_at=timezone.now() - timedelta(days=30),
        )

        response = authenticated_client.post(RECOVER_URL, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['reason'] == 'expired'

    def test_recover_unauthenticated(self, api_client):
        response = api_client.post(RECOVER_URL, {}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestDownloadExportAPI:
    """Tests for GET /api/account/exports/{id}/"""

    def create_export(self, user, expires_at=None):
        return DataExport.objects.create(
            user=user,
            export_version='1.0',
            payload={'export_version': '1.0', 'contracts': []},
            expires_at=expires_at or timezone.now() + timedelta(days=30),
        )

    def test_download_own_export(self, authenticated_client, user):
        export = self.create_export(user)

        response = authenticated_client.get(reverse('lifecycle:export-download', args=[export.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(export.id)
        assert response.data['payload'] == {'export_version': '1.0', 'contracts': []}

    def test_download_other_users_export(self, api_client, user, other_user):
        export = self.create_export(user)
        refresh = RefreshToken.for_user(other_user)
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')

        response = api_client.get(reverse('lifecycle:export-download', args=[export.id]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_download_expired_export(self, authenticated_client, user):
        export = self.create_export(user, expires_at=timezone.now() - timedelta(minutes=1))

        response = authenticated_client.get(reverse('lifecycle:export-download', args=[export.id]))

        assert response.status_code == status.HTTP_410_GONE
