"""
Celery tasks for background processing.

Tasks for best-effort notification delivery.
"""
import logging

from django.conf import settings

from core.infrastructure.webhooks import WebhookDeliveryError, WebhookDeliveryService
from LicenseKeyService.celery import app

logger = logging.getLogger(__name__)

EXPIRATION_WARNING_EVENT = "license.expiring"


@app.task(bind=True, max_retries=3)
def deliver_expiration_warning_task(self, payload: dict):
    """
    Celery task for expiration warning delivery.

    Args:
        payload: Warning data (license id, user, tier, expiration)
    """
    url = getattr(settings, "NOTIFICATION_WEBHOOK_URL", "")
    if not url:
        logger.info(
            "No notification webhook configured, dropping warning for license %s",
            payload.get("license_id"),
        )
        return False

    try:
        WebhookDeliveryService.deliver(
            url,
            EXPIRATION_WARNING_EVENT,
            payload,
            secret=getattr(settings, "NOTIFICATION_WEBHOOK_SECRET", ""),
            timeout=getattr(settings, "NOTIFICATION_WEBHOOK_TIMEOUT", 5.0),
        )
    except WebhookDeliveryError as exc:
        logger.error("Expiration warning delivery failed: %s", exc)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)

    return True
