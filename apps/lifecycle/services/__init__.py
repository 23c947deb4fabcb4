"""Services for account lifecycle business logic."""

from .exceptions import (
    LifecycleServiceError,
    DeletionAlreadyExecutingError,
    DeletionNotScheduledError,
    AccountNotRecoverableError,
    ExportNotFoundError,
    ExportExpiredError,
)
from .notifications import (
    NotificationChannel,
    EmailNotificationChannel,
    Notifier,
    Auditor,
)
from .export_snapshot import EXPORT_VERSION, ExportSnapshotBuilder
from .organization_disposition import (
    Disposition,
    DispositionOutcome,
    OrganizationDispositionResolver,
)
from .subscription_termination import CancellationOutcome, SubscriptionTerminator
from .deletion_scheduling import DeletionScheduler
from .recovery import (
    DEFAULT_RECOVERY_REASON,
    DeletionStatusView,
    RecoveryGate,
    days_until,
)
from .account_purge import AccountPurger, PurgeResult
from .orchestrator import (
    DegradedStep,
    DeletionRequestOutcome,
    RecoveryOutcome,
    SweepSummary,
    LifecycleManager,
)
from .factory import build_lifecycle_manager

__all__ = [
    # Exceptions
    'LifecycleServiceError',
    'DeletionAlreadyExecutingError',
    'DeletionNotScheduledError',
    'AccountNotRecoverableError',
    'ExportNotFoundError',
    'ExportExpiredError',
    # Notifier / auditor
    'NotificationChannel',
    'EmailNotificationChannel',
    'Notifier',
    'Auditor',
    # Components
    'EXPORT_VERSION',
    'ExportSnapshotBuilder',
    'Disposition',
    'DispositionOutcome',
    'OrganizationDispositionResolver',
    'CancellationOutcome',
    'SubscriptionTerminator',
    'DeletionScheduler',
    'DEFAULT_RECOVERY_REASON',
    'DeletionStatusView',
    'RecoveryGate',
    'days_until',
    'AccountPurger',
    'PurgeResult',
    # Orchestrator
    'DegradedStep',
    'DeletionRequestOutcome',
    'RecoveryOutcome',
    'SweepSummary',
    'LifecycleManager',
    'build_lifecycle_manager',
]
