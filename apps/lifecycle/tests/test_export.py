"""
Tests for the export snapshot builder and redaction.
"""

import json
import pytest
from uuid import uuid4
from django.core.serializers.json import DjangoJSONEncoder

from apps.accounts.services import UserNotFoundError
from apps.analytics.models import AnalyticsEvent, ReportHistory, ScheduledReport
from apps.contracts.models import AnalysisResult, Contract
from apps.lifecycle.models import ActivityRecord, ActivityType
from apps.lifecycle.redaction import REDACTED, redact
from apps.lifecycle.services import EXPORT_VERSION, ExportSnapshotBuilder
from apps.organizations.models import OrganizationRole

from .fakes import T0


@pytest.fixture
def builder(clock):
    return ExportSnapshotBuilder(activity_limit=1000, clock=clock)


@pytest.fixture
def user_data(user, other_user, make_organization):
    """Populate every kind of data the export covers."""
    contract = Contract.objects.create(user=user, file_name='lease.pdf', contract_type='lease', storage_key='s3://k')
    AnalysisResult.objects.create(contract=contract, summary='Looks fine')
    Contract.objects.create(user=other_user, file_name='not-mine.pdf')

    make_organization(other_user, [(user, OrganizationRole.ADMIN)], name='Acme')

    ActivityRecord.objects.create(
        user=user,
        activity_type=ActivityType.EXPORT_CREATED,
        description='Earlier export',
        metadata={'password': 'hunter2', 'nested': {'refresh_token': 'abc', 'ok': 1}},
    )
    AnalyticsEvent.objects.create(
        user=user,
        event_type='login',
        event_data={'Authorization': 'Bearer xyz', 'items': [{'api_key': 'k'}, {'page': 'home'}]},
    )
    ScheduledReport.objects.create(user=user, name='Weekly', frequency='weekly')
    ReportHistory.objects.create(user=user, report_name='Weekly', template='summary')
    return contract


class TestRedact:

    def test_masks_sensitive_keys_at_any_depth(self):
        value = {
            'password': 'x',
            'profile': {'API-Key': 'y', 'name': 'n'},
            'list': [{'client_secret': 'z'}, 'plain'],
        }

        assert redact(value) == {
            'password': REDACTED,
            'profile': {'API-Key': REDACTED, 'name': 'n'},
            'list': [{'client_secret': REDACTED}, 'plain'],
        }

    def test_does_not_mutate_input(self):
        value = {'token': 'abc'}

        redact(value)

        assert value == {'token': 'abc'}

    def test_scalars_pass_through(self):
        assert redact('password') == 'password'
        assert redact(None) is None


@pytest.mark.django_db
class TestExportSnapshotBuilder:

    def test_snapshot_sections(self, builder, user, user_data):
        snapshot = builder.build(user_id=user.id)

        assert set(snapshot) == {
            'user', 'contracts', 'organizations', 'activity', 'analytics',
            'settings', 'reports', 'export_date', 'export_version',
        }
        assert snapshot['export_version'] == EXPORT_VERSION
        assert snapshot['export_date'] == T0.isoformat()

    def test_contracts_include_analyses(self, builder, user, user_data):
        snapshot = builder.build(user_id=user.id)

        assert len(snapshot['contracts']) == 1
        contract = snapshot['contracts'][0]
        assert contract['file_name'] == 'lease.pdf'
        assert 'storage_key' not in contract
        assert contract['analysis_results'][0]['status'] == 'pending'

    def test_organizations(self, builder, user, user_data):
        snapshot = builder.build(user_id=user.id)

        assert len(snapshot['organizations']) == 1
        membership = snapshot['organizations'][0]
        assert membership['role'] == OrganizationRole.ADMIN
        assert membership['organization'] == {'name': 'Acme', 'description': 'Acme team'}

    def test_no_credential_material(self, builder, user, user_data):
        snapshot = builder.build(user_id=user.id)
        dumped = json.dumps(snapshot, cls=DjangoJSONEncoder)

        assert 'password' not in snapshot['user']
        assert user.password not in dumped
        assert 'hunter2' not in dumped
        assert 'Bearer xyz' not in dumped
        assert 'should-never-be-exported' not in dumped

        activity = snapshot['activity'][0]
        assert activity['metadata'] == {
            'password': REDACTED,
            'nested': {'refresh_token': REDACTED, 'ok': 1},
        }
        event = snapshot['analytics'][0]
        assert event['event_data']['items'] == [{'api_key': REDACTED}, {'page': 'home'}]

    def test_settings_and_reports(self, builder, user, user_data):
        snapshot = builder.build(user_id=user.id)

        assert snapshot['settings'] == {
            'notifications': {'email': True, 'push': False},
            'email': {'digest': 'weekly'},
        }
        assert snapshot['reports']['scheduled'][0]['name'] == 'Weekly'
        assert snapshot['reports']['history'][0]['template'] == 'summary'

    def test_activity_limit(self, clock, user):
        for i in range(5):
            ActivityRecord.objects.create(
                user=user,
                activity_type=ActivityType.EXPORT_CREATED,
                description=f'Export {i}',
            )

        snapshot = ExportSnapshotBuilder(activity_limit=3, clock=clock).build(user_id=user.id)

        assert len(snapshot['activity']) == 3

    def test_empty_account(self, builder, user):
        snapshot = builder.build(user_id=user.id)

        assert snapshot['contracts'] == []
        assert snapshot['organizations'] == []
        assert snapshot['reports'] == {'scheduled': [], 'history': []}

    def test_snapshot_is_json_serializable(self, builder, user, user_data):
        json.dumps(builder.build(user_id=user.id), cls=DjangoJSONEncoder)

    def test_unknown_user(self, builder, db):
        with pytest.raises(UserNotFoundError):
            builder.build(user_id=uuid4())

    def test_non_dict_preferences(self, builder, user):
        user.preferences = ['legacy']
        user.save(update_fields=['preferences'])

        snapshot = builder.build(user_id=user.id)

        assert snapshot['settings'] == {'notifications': {}, 'email': {}}
