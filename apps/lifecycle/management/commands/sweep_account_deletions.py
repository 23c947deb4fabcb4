"""
Management command to execute account deletions whose grace period has passed.

Meant to run periodically (cron, systemd timer, Kubernetes CronJob). Several
copies may run at once; each due record is claimed by exactly one of them.

Usage:
    python manage.py sweep_account_deletions
    python manage.py sweep_account_deletions --batch-size 50 --dry-run
"""

from django.core.management.base import BaseCommand, CommandError

from apps.lifecycle.services import build_lifecycle_manager


class Command(BaseCommand):
    help = 'Purge accounts whose deletion grace period has expired'

    def add_arguments(self, parser):
        parser.add_argument(
            '--batch-size',
            type=int,
            default=None,
            help='Maximum number of records to process (defaults to ACCOUNT_LIFECYCLE SWEEP_BATCH_SIZE)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the records that would be purged without claiming them',
        )

    def handle(self, *args, **options):
        batch_size = options['batch_size']
        if batch_size is not None and batch_size < 1:
            raise CommandError('--batch-size must be a positive integer')

        manager = build_lifecycle_manager()

        if options['dry_run']:
            records = list(manager.due_records(batch_size=batch_size))
            if not records:
                self.stdout.write(self.style.SUCCESS('No account deletions are due.'))
                return

            self.stdout.write(f'\nFound {len(records)} due account deletion(s):\n')
            for record in records:
                self.stdout.write(
                    f'  - {record.id} | user {record.user_id} | {record.status} | due {record.scheduled_for:%Y-%m-%d %H:%M}'
                )
            self.stdout.write(self.style.WARNING('\n--dry-run mode: No changes made.'))
            return

        summary = manager.sweep_expired(batch_size=batch_size)

        if not summary.claimed:
            self.stdout.write(self.style.SUCCESS('No account deletions are due.'))
            return

        self.stdout.write(
            self.style.SUCCESS(f'Executed {len(summary.executed)} account deletion(s).')
        )
        if summary.failed:
            self.stdout.write(
                self.style.ERROR(
                    f'{len(summary.failed)} deletion(s) failed and will be retried: '
                    + ', '.join(str(record_id) for record_id in summary.failed)
                )
            )
