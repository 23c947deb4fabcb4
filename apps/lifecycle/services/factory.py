"""Builds a LifecycleManager from the ACCOUNT_LIFECYCLE settings."""

from datetime import timedelta

from django.conf import settings

from apps.billing.providers import get_billing_provider

from .account_purge import AccountPurger
from .deletion_scheduling import DeletionScheduler
from .export_snapshot import ExportSnapshotBuilder
from .notifications import Auditor, EmailNotificationChannel, Notifier
from .orchestrator import LifecycleManager
from .organization_disposition import OrganizationDispositionResolver
from .recovery import RecoveryGate
from .subscription_termination import SubscriptionTerminator


def build_lifecycle_manager(*, billing_provider=None, notification_channel=None, clock=None) -> LifecycleManager:
    """
    Wire every lifecycle component with explicit configuration.

    Settings are read here and nowhere else. Any collaborator can be
    overridden, which is how tests inject fakes.
    """
    conf = settings.ACCOUNT_LIFECYCLE
    kwargs = {'clock': clock} if clock is not None else {}

    if billing_provider is None:
        billing_provider = get_billing_provider(
            name=conf['BILLING_PROVIDER'],
            api_key=conf['STRIPE_SECRET_KEY'],
            timeout=conf['BILLING_TIMEOUT_SECONDS'],
        )

    auditor = Auditor()
    disposition_resolver = OrganizationDispositionResolver(auditor=auditor)
    subscription_terminator = SubscriptionTerminator(
        billing_provider=billing_provider,
        auditor=auditor,
        **kwargs,
    )

    return LifecycleManager(
        export_builder=ExportSnapshotBuilder(activity_limit=conf['ACTIVITY_EXPORT_LIMIT'], **kwargs),
        disposition_resolver=disposition_resolver,
        subscription_terminator=subscription_terminator,
        scheduler=DeletionScheduler(grace_period=timedelta(days=conf['GRACE_PERIOD_DAYS']), **kwargs),
        recovery_gate=RecoveryGate(**kwargs),
        purger=AccountPurger(
            disposition_resolver=disposition_resolver,
            subscription_terminator=subscription_terminator,
            auditor=auditor,
            **kwargs,
        ),
        notifier=Notifier(channel=notification_channel or EmailNotificationChannel()),
        auditor=auditor,
        export_retention=timedelta(days=conf['EXPORT_RETENTION_DAYS']),
        sweep_batch_size=conf['SWEEP_BATCH_SIZE'],
        stale_claim_after=timedelta(minutes=conf['SWEEP_STALE_CLAIM_MINUTES']),
        **kwargs,
    )
