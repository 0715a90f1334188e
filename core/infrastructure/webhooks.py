"""
Webhook delivery service.

Delivers signed notification payloads to the configured endpoint.
Retries are left to the Celery task that calls it.
"""
import hashlib
import hmac
import json
import logging
from typing import Any, Dict

import requests
from django.utils import timezone

logger = logging.getLogger(__name__)


class WebhookDeliveryError(Exception):
    """Raised when a webhook could not be delivered."""


class WebhookDeliveryService:
    """Service for delivering webhooks to the notification endpoint."""

    @staticmethod
    def generate_signature(payload: str, secret: str) -> str:
        """
        Generate HMAC signature for webhook payload.

        Args:
            payload: JSON string payload
            secret: Webhook secret

        Returns:
            HMAC SHA-256 signature (hex)
        """
        return hmac.new(
            secret.encode(), payload.encode(), hashlib.sha256
        ).hexdigest()

    @staticmethod
    def build_payload(event_type: str, data: Dict[str, Any]) -> str:
        """Serialize a webhook body deterministically."""
        return json.dumps(
            {
                "event_type": event_type,
                "timestamp": timezone.now().isoformat(),
                "data": data,
            },
            sort_keys=True,
        )

    @staticmethod
    def deliver(
        url: str,
        event_type: str,
        data: Dict[str, Any],
        secret: str = "",
        timeout: float = 5.0,
    ) -> None:
        """
        Deliver one webhook.

        Args:
            url: Endpoint URL
            event_type: Event type (e.g., 'license.expiring')
            data: Webhook payload data
            secret: Signing secret; unsigned when empty
            timeout: Request timeout in seconds

        Raises:
            WebhookDeliveryError: If the endpoint could not be reached
                or answered with an error status
        """
        payload_json = WebhookDeliveryService.build_payload(event_type, data)
        headers = {
            "Content-Type": "application/json",
            "X-Webhook-Event": event_type,
            "User-Agent": "License-Key-Service-Webhook/1.0",
        }
        if secret:
            headers["X-Webhook-Signature"] = WebhookDeliveryService.generate_signature(
                payload_json, secret
            )

        try:
            response = requests.post(url, data=payload_json, headers=headers, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("Webhook delivery failed: %s - %s", event_type, e)
            raise WebhookDeliveryError(str(e)) from e

        logger.info("Webhook delivered successfully: %s", event_type)
