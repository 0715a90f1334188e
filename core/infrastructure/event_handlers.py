"""
Event handlers for domain events.

These handlers process domain events for side effects like
audit logging. They never touch license records.
"""

import logging

from core.domain.events import DomainEvent, EventHandler
from licenses.domain.events import (
    DeviceBound,
    DeviceUnbound,
    LicenseIssued,
    LicenseRenewed,
    LicenseRevoked,
    SubscriptionLevelChanged,
)

logger = logging.getLogger(__name__)

LICENSE_EVENTS = (
    LicenseIssued,
    LicenseRenewed,
    DeviceBound,
    DeviceUnbound,
    LicenseRevoked,
    SubscriptionLevelChanged,
)

# Attributes copied from an event into the audit log record.
_AUDIT_FIELDS = (
    "user_id",
    "subscription_level",
    "reason",
    "old_level",
    "new_level",
    "rebound",
)


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Writes one structured log line per license event.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        extra = {
            "event_id": str(event.event_id),
            "event_type": event.event_type,
            "aggregate_id": event.aggregate_id,
            "occurred_at": event.occurred_at.isoformat(),
        }
        for field in _AUDIT_FIELDS:
            if hasattr(event, field):
                extra[field] = getattr(event, field)
        for field in ("expires_at", "new_expiration"):
            if hasattr(event, field):
                extra[field] = getattr(event, field).isoformat()

        logger.info("Audit log: %s - %s", event.event_type, event.aggregate_id, extra=extra)


audit_handler = AuditLogEventHandler()


def register_event_handlers(bus=None):
    """Register all event handlers with the event bus."""
    if bus is None:
        from core.infrastructure.events import event_bus as bus

    for event_type in LICENSE_EVENTS:
        bus.subscribe(event_type, audit_handler)

    logger.info("Event handlers registered")
