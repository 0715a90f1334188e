"""
License domain events.

Domain events represent something that happened in the license domain.
They carry the record's surrogate id, never the raw license key.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from core.domain.events import DomainEvent


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LicenseIssued(DomainEvent):
    """Event raised when a license is issued."""

    def __init__(
        self,
        license_id: uuid.UUID,
        user_id: str,
        subscription_level: str,
        expires_at: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseIssued event.

        Args:
            license_id: License record UUID
            user_id: Owning principal
            subscription_level: Granted tier
            expires_at: Initial expiration
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=str(license_id),
            event_type="LicenseIssued",
        )
        self.license_id = license_id
        self.user_id = user_id
        self.subscription_level = subscription_level
        self.expires_at = expires_at


class LicenseRenewed(DomainEvent):
    """Event raised when a license is renewed."""

    def __init__(
        self,
        license_id: uuid.UUID,
        new_expiration: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=str(license_id),
            event_type="LicenseRenewed",
        )
        self.license_id = license_id
        self.new_expiration = new_expiration


class DeviceBound(DomainEvent):
    """Event raised when a device claims a license."""

    def __init__(
        self,
        license_id: uuid.UUID,
        device_id: str,
        rebound: bool = False,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=str(license_id),
            event_type="DeviceBound",
        )
        self.license_id = license_id
        self.device_id = device_id
        self.rebound = rebound


class DeviceUnbound(DomainEvent):
    """Event raised when a device binding is cleared."""

    def __init__(
        self,
        license_id: uuid.UUID,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=str(license_id),
            event_type="DeviceUnbound",
        )
        self.license_id = license_id


class LicenseRevoked(DomainEvent):
    """Event raised when a license is revoked."""

    def __init__(
        self,
        license_id: uuid.UUID,
        reason: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=str(license_id),
            event_type="LicenseRevoked",
        )
        self.license_id = license_id
        self.reason = reason


class SubscriptionLevelChanged(DomainEvent):
    """Event raised when a license changes tier."""

    def __init__(
        self,
        license_id: uuid.UUID,
        old_level: str,
        new_level: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=str(license_id),
            event_type="SubscriptionLevelChanged",
        )
        self.license_id = license_id
        self.old_level = old_level
        self.new_level = new_level
