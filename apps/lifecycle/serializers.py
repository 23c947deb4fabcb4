from rest_framework import serializers

from apps.accounts.models import User
from apps.accounts.services import DELETION_CONFIRMATION_PHRASE
from apps.analytics.models import AnalyticsEvent, ReportHistory, ScheduledReport
from apps.contracts.models import AnalysisResult, Contract
from apps.organizations.models import OrganizationMembership
from .models import ActivityRecord, DataExport, DeletionStatus
from .redaction import redact


# =============================================================================
# Request / response serializers
# =============================================================================

class DeletionRequestSerializer(serializers.Serializer):
    """Serializer for account deletion requests."""

    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'},
        help_text="Current password for confirmation"
    )
    confirmation = serializers.CharField(
        required=True,
        help_text=f"Must be exactly {DELETION_CONFIRMATION_PHRASE}"
    )
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000, default='')
    export_data = serializers.BooleanField(required=False, default=False)


class DeletionRequestResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    grace_period_days = serializers.IntegerField()
    deletion_date = serializers.DateTimeField()
    export_data_included = serializers.BooleanField()
    export_id = serializers.UUIDField(allow_null=True)
    degraded_steps = serializers.ListField(child=serializers.CharField())


class DeletionStatusSerializer(serializers.Serializer):
    """Read-only view of an account's deletion state."""

    is_scheduled_for_deletion = serializers.BooleanField()
    deletion_date = serializers.DateTimeField(allow_null=True)
    days_remaining = serializers.IntegerField(allow_null=True)
    reason = serializers.CharField(allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=DeletionStatus.choices, allow_null=True)
    can_recover = serializers.BooleanField()


class RecoveryRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000, default='')


class RecoveryResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    days_remaining = serializers.IntegerField()


class DataExportSerializer(serializers.ModelSerializer):
    """Downloadable export with its payload."""

    class Meta:
        model = DataExport
        fields = ['id', 'export_version', 'created_at', 'expires_at', 'payload']
        read_only_fields = fields


# =============================================================================
# Export snapshot serializers (redacted copies of user data)
# =============================================================================

class ExportUserSerializer(serializers.ModelSerializer):
    """Profile fields only; never credential material."""

    class Meta:
        model = User
        fields = ['id', 'email', 'display_name', 'created_at', 'updated_at']
        read_only_fields = fields


class ExportAnalysisResultSerializer(serializers.ModelSerializer):

    class Meta:
        model = AnalysisResult
        fields = ['id', 'status', 'created_at', 'completed_at']
        read_only_fields = fields


class ExportContractSerializer(serializers.ModelSerializer):

    analysis_results = ExportAnalysisResultSerializer(many=True, read_only=True)

    class Meta:
        model = Contract
        fields = ['id', 'file_name', 'contract_type', 'status', 'created_at', 'analysis_results']
        read_only_fields = fields


class ExportMembershipSerializer(serializers.ModelSerializer):

    organization_id = serializers.UUIDField(read_only=True)
    organization = serializers.SerializerMethodField()

    class Meta:
        model = OrganizationMembership
        fields = ['organization_id', 'role', 'joined_at', 'organization']
        read_only_fields = fields

    def get_organization(self, obj):
        return {
            'name': obj.organization.name,
            'description': obj.organization.description,
        }


class ExportActivitySerializer(serializers.ModelSerializer):

    metadata = serializers.SerializerMethodField()

    class Meta:
        model = ActivityRecord
        fields = ['id', 'activity_type', 'description', 'outcome', 'created_at', 'metadata']
        read_only_fields = fields

    def get_metadata(self, obj):
        return redact(obj.metadata)


class ExportAnalyticsEventSerializer(serializers.ModelSerializer):

    event_data = serializers.SerializerMethodField()

    class Meta:
        model = AnalyticsEvent
        fields = ['id', 'event_type', 'timestamp', 'event_data']
        read_only_fields = fields

    def get_event_data(self, obj):
        return redact(obj.event_data)


class ExportScheduledReportSerializer(serializers.ModelSerializer):

    class Meta:
        model = ScheduledReport
        fields = ['id', 'name', 'frequency', 'created_at']
        read_only_fields = fields


class ExportReportHistorySerializer(serializers.ModelSerializer):

    class Meta:
        model = ReportHistory
        fields = ['id', 'report_name', 'template', 'status', 'created_at']
        read_only_fields = fields
