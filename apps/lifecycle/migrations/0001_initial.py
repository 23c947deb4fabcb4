# Generated manually for the account lifecycle project

import uuid
from django.conf import settings
import django.core.serializers.json
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DeletionRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('scheduled_for', models.DateTimeField()),
                ('reason', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('scheduled', 'Scheduled'), ('executing', 'Executing'), ('cancelled', 'Cancelled'), ('executed', 'Executed')], default='scheduled', max_length=20)),
                ('requested_at', models.DateTimeField()),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_reason', models.TextField(blank=True)),
                ('claimed_at', models.DateTimeField(blank=True, null=True)),
                ('executed_at', models.DateTimeField(blank=True, null=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='deletion_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'deletion_records',
                'ordering': ['-requested_at'],
                'indexes': [models.Index(fields=['status', 'scheduled_for'], name='deletion_status_due_idx')],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status__in', ['scheduled', 'executing'])), fields=('user',), name='unique_active_deletion_per_user'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ActivityRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('activity_type', models.CharField(choices=[('account_deletion_scheduled', 'Account deletion scheduled'), ('account_deletion_rescheduled', 'Account deletion rescheduled'), ('account_deletion_recovered', 'Account deletion recovered'), ('account_deletion_executed', 'Account deletion executed'), ('account_deletion_failed', 'Account deletion failed'), ('organization_ownership_transferred', 'Organization ownership transferred'), ('organization_dissolved', 'Organization dissolved'), ('organization_membership_removed', 'Organization membership removed'), ('subscription_canceled', 'Subscription canceled'), ('subscription_cancellation_failed', 'Subscription cancellation failed'), ('data_export_created', 'Data export created'), ('data_export_failed', 'Data export failed'), ('notification_failed', 'Notification failed')], db_index=True, max_length=50)),
                ('description', models.CharField(max_length=255)),
                ('outcome', models.CharField(choices=[('success', 'Success'), ('degraded', 'Degraded'), ('failure', 'Failure')], default='success', max_length=20)),
                ('metadata', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='activity_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'activity_records',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['user', 'created_at'], name='activity_user_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='DataExport',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('export_version', models.CharField(max_length=10)),
                ('payload', models.JSONField(encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('expires_at', models.DateTimeField()),
                ('deletion_record', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='exports', to='lifecycle.deletionrecord')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='data_exports', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'data_exports',
                'ordering': ['-created_at'],
            },
        ),
    ]
