"""
Django management command to warn owners of licenses about to expire.

This command should be run periodically (e.g., via cron or scheduled task).
It never changes license records: expiration is computed at read time.
"""

import logging
from datetime import timedelta

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.management.base import BaseCommand

from core.domain.clock import SystemClock
from core.metrics import expiration_warnings_total
from licenses.infrastructure.notifications import get_notification_sink
from licenses.infrastructure.repositories.django_license_store import DjangoLicenseStore

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to send expiration warnings."""

    help = "Send expiration warnings for active licenses expiring soon"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--days",
            type=int,
            default=getattr(settings, "LICENSE_EXPIRY_WARNING_DAYS", 7),
            help="Warn about licenses expiring within this many days",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - list licenses without sending warnings",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        days = options["days"]
        dry_run = options["dry_run"]
        if days < 1:
            # pylint: disable=no-member
            self.stderr.write(self.style.ERROR("--days must be at least 1"))
            return

        store = DjangoLicenseStore()
        now = SystemClock().now()
        expiring = async_to_sync(self._find_expiring)(store, now, now + timedelta(days=days))

        self.stdout.write(f"Found {len(expiring)} license(s) expiring within {days} day(s)")

        if dry_run:
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No warnings will be sent"))
            for record in expiring[:10]:  # Show first 10
                self.stdout.write(f"  - License {record.id} expires at {record.expires_at}")
            return

        sink = get_notification_sink()
        sent = 0
        for record in expiring:
            if sink.notify_expiring(record, now):
                sent += 1
                expiration_warnings_total.labels(outcome="sent").inc()
            else:
                expiration_warnings_total.labels(outcome="failed").inc()
                logger.warning("Expiration warning for license %s was not sent", record.id)

        self.stdout.write(
            # pylint: disable=no-member
            self.style.SUCCESS(f"Sent {sent} of {len(expiring)} expiration warning(s)")
        )

    async def _find_expiring(self, store, start, end):
        """Load licenses expiring in [start, end)."""
        return await store.find_expiring(start, end)
