"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import logging
import time
from typing import Optional

from core.domain.clock import Clock, SystemClock
from core.domain.value_objects import DeviceId
from core.metrics import license_validation_duration_seconds, license_validations_total
from licenses.domain.license import LicenseRecord
from licenses.domain.license_key import mask_key
from licenses.domain.verdict import BindRequest, InvalidReason, Verdict
from licenses.ports.license_store import LicenseStore

logger = logging.getLogger(__name__)


class ValidationEngine:
    """
    Domain service for license validation.

    Read-only: it never writes to the store. When an unbound license
    is presented with a device, the verdict carries a BindRequest and
    the caller decides whether to act on it.
    """

    def __init__(self, store: LicenseStore, clock: Optional[Clock] = None):
        """
        Initialize engine.

        Args:
            store: License store to read from
            clock: Source of the current time
        """
        self.store = store
        self.clock = clock or SystemClock()

    async def validate(
        self, key: str, presented_device_id: Optional[str] = None
    ) -> Verdict:
        """
        Validate a license key presented by a client.

        Checks run in a fixed order and stop at the first failure:
        existence, revocation, expiration, device binding.

        Args:
            key: License key string
            presented_device_id: Device fingerprint, if the client sent one

        Returns:
            Verdict describing the outcome

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        started = time.perf_counter()
        try:
            record = await self.store.get(key) if key else None
            verdict = self.evaluate(record, presented_device_id)
        finally:
            license_validation_duration_seconds.observe(time.perf_counter() - started)

        license_validations_total.labels(result=verdict.result).inc()
        logger.debug("Validated license %s: %s", mask_key(key), verdict.result)
        return verdict

    def evaluate(
        self, record: Optional[LicenseRecord], presented_device_id: Optional[str] = None
    ) -> Verdict:
        """
        Apply validation policy to an already loaded record.

        A blank fingerprint counts as no fingerprint. One that is not a
        valid DeviceId can never match or claim a license.

        Args:
            record: Stored record, or None if the key is unknown
            presented_device_id: Device fingerprint, if any

        Returns:
            Verdict describing the outcome
        """
        if record is None:
            return Verdict.invalid(InvalidReason.NOT_FOUND)

        if record.is_revoked:
            return Verdict.invalid(InvalidReason.REVOKED)

        if record.is_expired(self.clock.now()):
            return Verdict.invalid(InvalidReason.EXPIRED)

        device_id = (presented_device_id or "").strip()
        if device_id:
            try:
                DeviceId(device_id)
            except ValueError:
                return Verdict.invalid(InvalidReason.DEVICE_MISMATCH)
            if record.is_bound and record.bound_device_id != device_id:
                return Verdict.invalid(InvalidReason.DEVICE_MISMATCH)
            if not record.is_bound:
                return Verdict.valid_for(
                    record.subscription_level,
                    bind_request=BindRequest(key=record.key, device_id=device_id),
                )

        return Verdict.valid_for(record.subscription_level)
