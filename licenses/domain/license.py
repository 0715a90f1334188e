"""
LicenseRecord domain entity.

This is the core domain entity representing an issued license.
It contains business logic and is independent of infrastructure.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from core.domain.exceptions import AlreadyBoundError, LicenseRevokedError
from core.domain.value_objects import DeviceId, LicenseStatus, SubscriptionLevel


@dataclass(frozen=True)
class LicenseRecord:
    """
    LicenseRecord domain entity.

    Every transition returns a new instance; the store decides when
    the new instance replaces the persisted one. A transition that
    changes nothing returns ``self`` so the store can skip the write.
    """

    id: uuid.UUID
    key: str
    user_id: str
    subscription_level: SubscriptionLevel
    issued_at: datetime
    expires_at: datetime
    status: LicenseStatus
    bound_device_id: Optional[str]
    revoked_at: Optional[datetime]
    revocation_reason: Optional[str]
    updated_at: datetime
    version: int = 1

    def __post_init__(self):
        """Validate license record."""
        if not self.key or len(self.key.strip()) == 0:
            raise ValueError("License key cannot be empty")
        if len(self.key) > 100:
            raise ValueError("License key too long")
        if not self.user_id or len(self.user_id.strip()) == 0:
            raise ValueError("User ID is required")
        if self.expires_at <= self.issued_at:
            raise ValueError("Expiration must be after issue time")
        if self.status == LicenseStatus.EXPIRED:
            raise ValueError("Expired status is derived, it cannot be stored")

    @classmethod
    def create(
        cls,
        key: str,
        user_id: str,
        subscription_level: SubscriptionLevel,
        issued_at: datetime,
        expires_at: datetime,
        license_id: Optional[uuid.UUID] = None,
    ) -> "LicenseRecord":
        """
        Create a new LicenseRecord entity.

        Args:
            key: Generated license key
            user_id: Owning principal
            subscription_level: Granted tier
            issued_at: Issue time
            expires_at: Expiration time, strictly after issued_at
            license_id: Optional UUID (generated if not provided)

        Returns:
            LicenseRecord entity instance
        """
        return cls(
            id=license_id or uuid.uuid4(),
            key=key,
            user_id=user_id,
            subscription_level=subscription_level,
            issued_at=issued_at,
            expires_at=expires_at,
            status=LicenseStatus.ACTIVE,
            bound_device_id=None,
            revoked_at=None,
            revocation_reason=None,
            updated_at=issued_at,
        )

    @property
    def is_revoked(self) -> bool:
        return self.status == LicenseStatus.REVOKED

    @property
    def is_bound(self) -> bool:
        return self.bound_device_id is not None

    def is_expired(self, current_time: datetime) -> bool:
        """
        Check expiration lazily against the given time.

        Args:
            current_time: Current time

        Returns:
            True once current_time reaches expires_at
        """
        return current_time >= self.expires_at

    def status_at(self, current_time: datetime) -> LicenseStatus:
        """
        Compute the effective status.

        Args:
            current_time: Current time

        Returns:
            REVOKED, EXPIRED or ACTIVE, in that precedence
        """
        if self.is_revoked:
            return LicenseStatus.REVOKED
        if self.is_expired(current_time):
            return LicenseStatus.EXPIRED
        return LicenseStatus.ACTIVE

    def _ensure_not_revoked(self) -> None:
        if self.is_revoked:
            raise LicenseRevokedError(f"License {self.id} is revoked")

    def renew(self, extension: timedelta, current_time: datetime) -> "LicenseRecord":
        """
        Extend the expiration.

        The extension starts from the later of the current expiration
        and now, so an expired license gets the full extension.

        Args:
            extension: Positive duration to add
            current_time: Current time

        Returns:
            New LicenseRecord with the extended expiration

        Raises:
            LicenseRevokedError: If the license is revoked
            ValueError: If the extension is not positive or overflows
        """
        self._ensure_not_revoked()
        if extension <= timedelta(0):
            raise ValueError("Extension must be positive")

        base = max(self.expires_at, current_time)
        try:
            new_expiration = base + extension
        except OverflowError as e:
            raise ValueError("Extension is too large") from e
        return replace(self, expires_at=new_expiration, updated_at=current_time)

    def bind_device(
        self,
        device_id: str,
        current_time: datetime,
        allow_rebind: bool = False,
    ) -> "LicenseRecord":
        """
        Bind the license to a device.

        Args:
            device_id: Device fingerprint
            current_time: Current time
            allow_rebind: Replace an existing binding to another device

        Returns:
            New LicenseRecord bound to device_id, or self if already bound to it

        Raises:
            LicenseRevokedError: If the license is revoked
            AlreadyBoundError: If bound to another device and rebinding is not allowed
        """
        device = DeviceId(device_id)
        self._ensure_not_revoked()

        if self.bound_device_id == device.value:
            return self
        if self.is_bound and not allow_rebind:
            raise AlreadyBoundError(f"License {self.id} is bound to another device")

        return replace(self, bound_device_id=device.value, updated_at=current_time)

    def unbind_device(self, current_time: datetime) -> "LicenseRecord":
        """
        Clear the device binding.

        Raises:
            LicenseRevokedError: If the license is revoked
        """
        self._ensure_not_revoked()
        if not self.is_bound:
            return self
        return replace(self, bound_device_id=None, updated_at=current_time)

    def revoke(self, reason: str, current_time: datetime) -> "LicenseRecord":
        """
        Revoke the license permanently.

        Revoking twice is a no-op that keeps the original reason.

        Args:
            reason: Why the license is revoked
            current_time: Current time

        Returns:
            New LicenseRecord with revoked status, or self if already revoked
        """
        if self.is_revoked:
            return self
        return replace(
            self,
            status=LicenseStatus.REVOKED,
            revoked_at=current_time,
            revocation_reason=reason or "",
            updated_at=current_time,
        )

    def change_subscription_level(
        self, new_level: SubscriptionLevel, current_time: datetime
    ) -> "LicenseRecord":
        """
        Move the license to another tier.

        Status, expiration and binding are left untouched.

        Raises:
            LicenseRevokedError: If the license is revoked
        """
        self._ensure_not_revoked()
        if self.subscription_level == new_level:
            return self
        return replace(self, subscription_level=new_level, updated_at=current_time)
