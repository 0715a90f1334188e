"""
Notification sink adapters.

Both adapters are fire-and-forget: they report failure through the
return value and never raise into the caller.
"""
import logging
from datetime import datetime

from licenses.domain.license import LicenseRecord
from licenses.ports.notification_sink import NotificationSink

logger = logging.getLogger(__name__)


def expiration_payload(record: LicenseRecord, now: datetime) -> dict:
    """
    Build the expiration warning payload.

    The raw key is deliberately absent.

    Args:
        record: License about to expire
        now: Current time

    Returns:
        JSON-serializable payload
    """
    remaining = record.expires_at - now
    return {
        "license_id": str(record.id),
        "user_id": record.user_id,
        "subscription_level": record.subscription_level.value,
        "expires_at": record.expires_at.isoformat(),
        "days_remaining": max(0, remaining.days),
    }


class LoggingNotificationSink(NotificationSink):
    """Sink that only writes the warning to the log."""

    def notify_expiring(self, record: LicenseRecord, now: datetime) -> bool:
        payload = expiration_payload(record, now)
        logger.info("License %s expires soon", record.id, extra=payload)
        return True


class CeleryNotificationSink(NotificationSink):
    """Sink that hands warnings to a Celery worker for webhook delivery."""

    def notify_expiring(self, record: LicenseRecord, now: datetime) -> bool:
        from core.tasks import deliver_expiration_warning_task

        payload = expiration_payload(record, now)
        try:
            deliver_expiration_warning_task.delay(payload)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(
                "Could not enqueue expiration warning for license %s: %s",
                record.id,
                e,
                exc_info=True,
            )
            return False
        return True


def get_notification_sink() -> NotificationSink:
    """
    Build the sink selected by the NOTIFICATION_SINK setting.

    Returns:
        CeleryNotificationSink for "celery", LoggingNotificationSink otherwise
    """
    from django.conf import settings

    if getattr(settings, "NOTIFICATION_SINK", "logging") == "celery":
        return CeleryNotificationSink()
    return LoggingNotificationSink()
