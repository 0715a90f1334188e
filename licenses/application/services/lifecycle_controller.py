"""
License lifecycle controller.

Owns every write to license records: issuance, renewal, device
binding, tier changes and revocation. Each write goes through
LicenseStore.update so it is applied atomically per key.
"""
import logging
from datetime import timedelta
from typing import Callable, Optional, Tuple, Union

from core.domain.clock import Clock, SystemClock
from core.domain.events import DomainEvent, EventBus
from core.domain.exceptions import DuplicateKeyError, IssuanceFailedError
from core.domain.value_objects import SubscriptionLevel
from core.metrics import (
    devices_bound_total,
    key_collisions_total,
    licenses_issued_total,
    licenses_renewed_total,
    licenses_revoked_total,
    subscription_level_changes_total,
)
from licenses.domain.events import (
    DeviceBound,
    DeviceUnbound,
    LicenseIssued,
    LicenseRenewed,
    LicenseRevoked,
    SubscriptionLevelChanged,
)
from licenses.domain.license import LicenseRecord
from licenses.domain.license_key import KeyGenerator, mask_key
from licenses.ports.license_store import LicenseStore

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY = timedelta(days=365)
DEFAULT_MAX_ISSUE_ATTEMPTS = 5

Transition = Callable[[LicenseRecord], LicenseRecord]


class LifecycleController:
    """
    Applies the license state machine.

    pending -> active on issue, active|expired -> active on renew,
    active|expired -> revoked on revoke. Revoked is terminal.
    """

    def __init__(
        self,
        store: LicenseStore,
        key_generator: Optional[KeyGenerator] = None,
        clock: Optional[Clock] = None,
        event_bus: Optional[EventBus] = None,
        validity: timedelta = DEFAULT_VALIDITY,
        max_issue_attempts: int = DEFAULT_MAX_ISSUE_ATTEMPTS,
    ):
        """
        Initialize controller.

        Args:
            store: License store
            key_generator: Key generator (default shape if not provided)
            clock: Source of the current time
            event_bus: Bus to publish lifecycle events on, if any
            validity: Default validity window for new licenses
            max_issue_attempts: Keys tried before issuance gives up
        """
        if validity <= timedelta(0):
            raise ValueError("Validity window must be positive")
        if max_issue_attempts < 1:
            raise ValueError("At least one issue attempt is required")

        self.store = store
        self.key_generator = key_generator or KeyGenerator()
        self.clock = clock or SystemClock()
        self.event_bus = event_bus
        self.validity = validity
        self.max_issue_attempts = max_issue_attempts

    @classmethod
    def from_settings(
        cls,
        store: LicenseStore,
        clock: Optional[Clock] = None,
        event_bus: Optional[EventBus] = None,
    ) -> "LifecycleController":
        """
        Build a controller configured from Django settings.

        Args:
            store: License store
            clock: Source of the current time
            event_bus: Bus to publish lifecycle events on

        Returns:
            Configured LifecycleController
        """
        from django.conf import settings

        return cls(
            store=store,
            key_generator=KeyGenerator(prefix=getattr(settings, "LICENSE_KEY_PREFIX", "")),
            clock=clock,
            event_bus=event_bus,
            validity=timedelta(days=getattr(settings, "LICENSE_VALIDITY_DAYS", 365)),
            max_issue_attempts=getattr(
                settings, "LICENSE_ISSUE_MAX_ATTEMPTS", DEFAULT_MAX_ISSUE_ATTEMPTS
            ),
        )

    async def issue(
        self,
        user_id: str,
        subscription_level: Union[SubscriptionLevel, str],
        validity: Optional[timedelta] = None,
    ) -> LicenseRecord:
        """
        Issue a new license.

        Args:
            user_id: Owning principal
            subscription_level: Granted tier
            validity: Validity window (controller default if not provided)

        Returns:
            Stored LicenseRecord

        Raises:
            ValueError: If the arguments are invalid
            IssuanceFailedError: If every generated key collided
            StoreUnavailableError: If the store cannot be reached
        """
        level = SubscriptionLevel(subscription_level)
        window = validity or self.validity
        if window <= timedelta(0):
            raise ValueError("Validity window must be positive")

        for attempt in range(1, self.max_issue_attempts + 1):
            issued_at = self.clock.now()
            try:
                expires_at = issued_at + window
            except OverflowError as e:
                raise ValueError("Validity window is too large") from e
            record = LicenseRecord.create(
                key=self.key_generator.generate(),
                user_id=user_id,
                subscription_level=level,
                issued_at=issued_at,
                expires_at=expires_at,
            )
            try:
                stored = await self.store.put(record)
            except DuplicateKeyError:
                key_collisions_total.inc()
                logger.warning(
                    "Generated key collided, retrying (attempt %d/%d)",
                    attempt,
                    self.max_issue_attempts,
                )
                continue

            licenses_issued_total.labels(subscription_level=level.value).inc()
            logger.info(
                "Issued license %s for user %s",
                stored.id,
                user_id,
                extra={"license_id": str(stored.id), "subscription_level": level.value},
            )
            await self._publish(
                LicenseIssued(
                    license_id=stored.id,
                    user_id=stored.user_id,
                    subscription_level=level.value,
                    expires_at=stored.expires_at,
                )
            )
            return stored

        logger.error("Could not issue a unique key after %d attempts", self.max_issue_attempts)
        raise IssuanceFailedError(
            f"Could not issue a unique license key after {self.max_issue_attempts} attempts"
        )

    async def renew(self, key: str, extension: timedelta) -> LicenseRecord:
        """
        Extend a license.

        Args:
            key: License key
            extension: Positive duration to add

        Returns:
            Renewed LicenseRecord

        Raises:
            LicenseNotFoundError: If the key is unknown
            LicenseRevokedError: If the license is revoked
        """
        now = self.clock.now()
        previous, renewed = await self._mutate(key, lambda record: record.renew(extension, now))

        if previous is not None:
            licenses_renewed_total.inc()
            logger.info("Renewed license %s until %s", renewed.id, renewed.expires_at.isoformat())
            await self._publish(
                LicenseRenewed(license_id=renewed.id, new_expiration=renewed.expires_at)
            )
        return renewed

    async def bind(
        self, key: str, device_id: str, allow_rebind: bool = False
    ) -> LicenseRecord:
        """
        Bind a license to a device.

        Binding the device a license is already bound to is a no-op.

        Args:
            key: License key
            device_id: Device fingerprint
            allow_rebind: Replace a binding to another device

        Returns:
            Bound LicenseRecord

        Raises:
            LicenseNotFoundError: If the key is unknown
            LicenseRevokedError: If the license is revoked
            AlreadyBoundError: If bound elsewhere and rebinding is not allowed
        """
        now = self.clock.now()
        previous, bound = await self._mutate(
            key, lambda record: record.bind_device(device_id, now, allow_rebind=allow_rebind)
        )

        if previous is not None:
            rebound = previous.is_bound
            devices_bound_total.labels(rebound=str(rebound).lower()).inc()
            logger.info("Bound license %s to a device (rebound=%s)", bound.id, rebound)
            await self._publish(
                DeviceBound(license_id=bound.id, device_id=device_id, rebound=rebound)
            )
        return bound

    async def unbind(self, key: str) -> LicenseRecord:
        """
        Clear a license's device binding.

        Raises:
            LicenseNotFoundError: If the key is unknown
            LicenseRevokedError: If the license is revoked
        """
        now = self.clock.now()
        previous, unbound = await self._mutate(key, lambda record: record.unbind_device(now))

        if previous is not None:
            logger.info("Cleared device binding of license %s", unbound.id)
            await self._publish(DeviceUnbound(license_id=unbound.id))
        return unbound

    async def revoke(self, key: str, reason: str) -> LicenseRecord:
        """
        Revoke a license permanently.

        Revoking an already revoked license succeeds without change.

        Raises:
            LicenseNotFoundError: If the key is unknown
        """
        now = self.clock.now()
        previous, revoked = await self._mutate(key, lambda record: record.revoke(reason, now))

        if previous is not None:
            licenses_revoked_total.inc()
            logger.info("Revoked license %s: %s", revoked.id, reason)
            await self._publish(LicenseRevoked(license_id=revoked.id, reason=reason))
        return revoked

    async def change_tier(
        self, key: str, new_level: Union[SubscriptionLevel, str]
    ) -> LicenseRecord:
        """
        Change a license's subscription level.

        Raises:
            LicenseNotFoundError: If the key is unknown
            LicenseRevokedError: If the license is revoked
        """
        level = SubscriptionLevel(new_level)
        now = self.clock.now()
        previous, changed = await self._mutate(
            key, lambda record: record.change_subscription_level(level, now)
        )

        if previous is not None:
            subscription_level_changes_total.labels(new_level=level.value).inc()
            logger.info(
                "Changed license %s tier from %s to %s",
                changed.id,
                previous.subscription_level.value,
                level.value,
            )
            await self._publish(
                SubscriptionLevelChanged(
                    license_id=changed.id,
                    old_level=previous.subscription_level.value,
                    new_level=level.value,
                )
            )
        return changed

    async def _mutate(
        self, key: str, transition: Transition
    ) -> Tuple[Optional[LicenseRecord], LicenseRecord]:
        """
        Apply a transition through the store.

        Returns:
            Tuple of (record before the change or None if nothing changed,
            stored record)
        """
        before = []

        def mutation(record: LicenseRecord) -> LicenseRecord:
            updated = transition(record)
            if updated is not record:
                before.append(record)
            return updated

        result = await self.store.update(key, mutation)
        logger.debug("Mutated license %s", mask_key(key))
        return (before[-1] if before else None), result

    async def _publish(self, event: DomainEvent) -> None:
        """Publish an event without letting its failure reach the caller."""
        if self.event_bus is None:
            return
        try:
            await self.event_bus.publish(event)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Failed to publish %s: %s", event.event_type, e, exc_info=True)
