"""
Unit tests for the LifecycleController application service.
"""
import asyncio
from datetime import timedelta

import pytest

from core.domain.exceptions import (
    AlreadyBoundError,
    IssuanceFailedError,
    LicenseNotFoundError,
    LicenseRevokedError,
)
from core.domain.value_objects import LicenseStatus, SubscriptionLevel
from licenses.application.handlers.validate_license_handler import ValidateLicenseHandler
from licenses.application.queries.validate_license import ValidateLicenseQuery
from licenses.application.services.lifecycle_controller import LifecycleController
from licenses.domain.events import (
    DeviceBound,
    DeviceUnbound,
    LicenseIssued,
    LicenseRenewed,
    LicenseRevoked,
    SubscriptionLevelChanged,
)
from licenses.domain.license import LicenseRecord
from licenses.domain.verdict import InvalidReason, Verdict

UNKNOWN_KEY = "ZZZZZ-ZZZZZ-ZZZZZ-ZZZZZ-ZZZZZ-ZZZZZ"


class SequenceKeyGenerator:
    """Key generator that hands out a fixed sequence of keys."""

    def __init__(self, keys):
        self._keys = iter(keys)

    def generate(self):
        return next(self._keys)


class ExplodingEventBus:
    """Event bus whose publish always fails."""

    def subscribe(self, event_type, handler):
        pass

    async def publish(self, event):
        raise RuntimeError("bus down")


class TestIssue:
    """Tests for issuing licenses."""

    @pytest.mark.asyncio
    async def test_issue_license(self, controller, store, clock, recorded_events):
        """Test issue stores an active unbound license for a year."""
        record = await controller.issue("user-1", "pro")

        assert record.status == LicenseStatus.ACTIVE
        assert record.subscription_level == SubscriptionLevel.PRO
        assert record.bound_device_id is None
        assert record.issued_at == clock.now()
        assert record.expires_at == clock.now() + timedelta(days=365)
        assert await store.get(record.key) == record

        assert len(recorded_events) == 1
        assert isinstance(recorded_events[0], LicenseIssued)
        assert recorded_events[0].aggregate_id == str(record.id)

    @pytest.mark.asyncio
    async def test_issue_with_custom_validity(self, controller, clock):
        """Test a per-call validity window."""
        record = await controller.issue("user-1", SubscriptionLevel.FREE, timedelta(days=14))
        assert record.expires_at == clock.now() + timedelta(days=14)

    @pytest.mark.asyncio
    async def test_issue_unknown_level(self, controller, store):
        """Test unknown tier is rejected before anything is stored."""
        with pytest.raises(ValueError):
            await controller.issue("user-1", "platinum")
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_issue_non_positive_validity(self, controller):
        """Test zero validity is rejected."""
        with pytest.raises(ValueError):
            await controller.issue("user-1", "pro", timedelta(seconds=-1))

    @pytest.mark.asyncio
    async def test_issue_overflowing_validity(self, controller, store):
        """Test a window past the calendar limit is a ValueError, not an overflow."""
        with pytest.raises(ValueError, match="too large"):
            await controller.issue("user-1", "pro", timedelta(days=999999999))
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_issue_retries_on_collision(self, store, clock, sample_record):
        """Test a duplicate key is regenerated."""
        await store.put(sample_record)
        fresh_key = "FRESH-KEY00-00000-00000-00000-00000"
        controller = LifecycleController(
            store=store,
            key_generator=SequenceKeyGenerator([sample_record.key, fresh_key]),
            clock=clock,
        )

        record = await controller.issue("user-2", "basic")

        assert record.key == fresh_key
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_issue_gives_up_after_max_attempts(self, store, clock, sample_record):
        """Test issuance fails after the bounded number of collisions."""
        await store.put(sample_record)
        controller = LifecycleController(
            store=store,
            key_generator=SequenceKeyGenerator([sample_record.key] * 3),
            clock=clock,
            max_issue_attempts=3,
        )

        with pytest.raises(IssuanceFailedError):
            await controller.issue("user-2", "basic")
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_event_bus_failure_does_not_fail_issue(self, store, clock):
        """Test publishing is fire-and-forget."""
        controller = LifecycleController(store=store, clock=clock, event_bus=ExplodingEventBus())

        record = await controller.issue("user-1", "pro")

        assert await store.get(record.key) is not None

    def test_rejects_bad_configuration(self, store):
        """Test controller configuration is validated."""
        with pytest.raises(ValueError):
            LifecycleController(store=store, validity=timedelta(0))
        with pytest.raises(ValueError):
            LifecycleController(store=store, max_issue_attempts=0)


class TestRenew:
    """Tests for renewing licenses."""

    @pytest.mark.asyncio
    async def test_renew_active(self, controller, clock, recorded_events):
        """Test renewal adds to the current expiration."""
        record = await controller.issue("user-1", "pro")

        renewed = await controller.renew(record.key, timedelta(days=30))

        assert renewed.expires_at == record.expires_at + timedelta(days=30)
        assert renewed.version == record.version + 1
        assert isinstance(recorded_events[-1], LicenseRenewed)

    @pytest.mark.asyncio
    async def test_renew_unknown(self, controller):
        """Test renewing an unknown key."""
        with pytest.raises(LicenseNotFoundError):
            await controller.renew(UNKNOWN_KEY, timedelta(days=1))

    @pytest.mark.asyncio
    async def test_renew_revoked_leaves_record_untouched(self, controller, store):
        """Test renewal of a revoked license is rejected without a write."""
        record = await controller.issue("user-1", "pro")
        revoked = await controller.revoke(record.key, "fraud")

        with pytest.raises(LicenseRevokedError):
            await controller.renew(record.key, timedelta(days=30))
        assert await store.get(record.key) == revoked

    @pytest.mark.asyncio
    async def test_renew_overflowing_extension(self, controller, store):
        """Test an extension past the calendar limit leaves the record untouched."""
        record = await controller.issue("user-1", "pro")

        with pytest.raises(ValueError, match="too large"):
            await controller.renew(record.key, timedelta(days=999999999))
        assert await store.get(record.key) == record


class TestBinding:
    """Tests for device binding."""

    @pytest.mark.asyncio
    async def test_bind(self, controller, recorded_events):
        """Test binding an unbound license."""
        record = await controller.issue("user-1", "pro")

        bound = await controller.bind(record.key, "D1")

        assert bound.bound_device_id == "D1"
        assert isinstance(recorded_events[-1], DeviceBound)
        assert recorded_events[-1].rebound is False

    @pytest.mark.asyncio
    async def test_bind_same_device_is_silent(self, controller, recorded_events):
        """Test rebinding the same device neither writes nor publishes."""
        record = await controller.issue("user-1", "pro")
        bound = await controller.bind(record.key, "D1")
        events_before = len(recorded_events)

        again = await controller.bind(record.key, "D1")

        assert again.version == bound.version
        assert len(recorded_events) == events_before

    @pytest.mark.asyncio
    async def test_bind_other_device(self, controller):
        """Test a second device cannot claim the license."""
        record = await controller.issue("user-1", "pro")
        await controller.bind(record.key, "D1")

        with pytest.raises(AlreadyBoundError):
            await controller.bind(record.key, "D2")

    @pytest.mark.asyncio
    async def test_rebind(self, controller, recorded_events):
        """Test explicit rebinding."""
        record = await controller.issue("user-1", "pro")
        await controller.bind(record.key, "D1")

        rebound = await controller.bind(record.key, "D2", allow_rebind=True)

        assert rebound.bound_device_id == "D2"
        assert recorded_events[-1].rebound is True

    @pytest.mark.asyncio
    async def test_unbind(self, controller, recorded_events):
        """Test clearing the binding."""
        record = await controller.issue("user-1", "pro")
        await controller.bind(record.key, "D1")

        unbound = await controller.unbind(record.key)

        assert unbound.bound_device_id is None
        assert isinstance(recorded_events[-1], DeviceUnbound)

    @pytest.mark.asyncio
    async def test_bind_revoked(self, controller):
        """Test a revoked license cannot be bound."""
        record = await controller.issue("user-1", "pro")
        await controller.revoke(record.key, "")

        with pytest.raises(LicenseRevokedError):
            await controller.bind(record.key, "D1")


class TestRevokeAndTier:
    """Tests for revocation and tier changes."""

    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, controller, recorded_events):
        """Test revoking twice succeeds and publishes once."""
        record = await controller.issue("user-1", "pro")

        first = await controller.revoke(record.key, "chargeback")
        second = await controller.revoke(record.key, "duplicate request")

        assert second == first
        assert second.revocation_reason == "chargeback"
        revoked_events = [e for e in recorded_events if isinstance(e, LicenseRevoked)]
        assert len(revoked_events) == 1

    @pytest.mark.asyncio
    async def test_revoke_unknown(self, controller):
        """Test revoking an unknown key."""
        with pytest.raises(LicenseNotFoundError):
            await controller.revoke(UNKNOWN_KEY, "")

    @pytest.mark.asyncio
    async def test_change_tier(self, controller, recorded_events):
        """Test upgrading keeps expiry and binding."""
        record = await controller.issue("user-1", "basic")
        await controller.bind(record.key, "D1")

        changed = await controller.change_tier(record.key, "enterprise")

        assert changed.subscription_level == SubscriptionLevel.ENTERPRISE
        assert changed.expires_at == record.expires_at
        assert changed.bound_device_id == "D1"
        event = recorded_events[-1]
        assert isinstance(event, SubscriptionLevelChanged)
        assert (event.old_level, event.new_level) == ("basic", "enterprise")

    @pytest.mark.asyncio
    async def test_change_tier_of_revoked(self, controller):
        """Test a revoked license cannot change tier."""
        record = await controller.issue("user-1", "basic")
        await controller.revoke(record.key, "")

        with pytest.raises(LicenseRevokedError):
            await controller.change_tier(record.key, "pro")


class TestScenarios:
    """End-to-end lifecycle scenarios over the in-memory store."""

    @pytest.mark.asyncio
    async def test_expire_then_renew(self, controller, engine, clock):
        """Test a year-long license expires and comes back on renewal."""
        record = await controller.issue("U", "pro", timedelta(days=365))

        assert await engine.validate(record.key) == Verdict.valid_for(SubscriptionLevel.PRO)

        clock.advance(timedelta(days=366))
        assert (await engine.validate(record.key)).reason == InvalidReason.EXPIRED

        await controller.renew(record.key, timedelta(days=30))
        assert await engine.validate(record.key) == Verdict.valid_for(SubscriptionLevel.PRO)

    @pytest.mark.asyncio
    async def test_first_claim_wins(self, controller, engine):
        """Test device-1 claims the license and device-2 is rejected."""
        handler = ValidateLicenseHandler(engine=engine, controller=controller)
        record = await controller.issue("U", "pro")

        first = await handler.handle(ValidateLicenseQuery(record.key, "device-1"))
        second = await handler.handle(ValidateLicenseQuery(record.key, "device-2"))
        third = await handler.handle(ValidateLicenseQuery(record.key, "device-1"))

        assert first.valid is True
        assert second.reason == InvalidReason.DEVICE_MISMATCH
        assert third.valid is True

    @pytest.mark.asyncio
    async def test_concurrent_first_claims(self, controller, engine, store):
        """Test exactly one of many concurrent devices wins the binding."""
        handler = ValidateLicenseHandler(engine=engine, controller=controller)
        record = await controller.issue("U", "pro")
        devices = [f"device-{i}" for i in range(10)]

        verdicts = await asyncio.gather(
            *(handler.handle(ValidateLicenseQuery(record.key, device)) for device in devices)
        )

        winners = [device for device, verdict in zip(devices, verdicts) if verdict.valid]
        assert len(winners) == 1
        assert all(
            verdict.reason == InvalidReason.DEVICE_MISMATCH
            for verdict in verdicts
            if not verdict.valid
        )
        stored = await store.get(record.key)
        assert stored.bound_device_id == winners[0]

    @pytest.mark.asyncio
    async def test_concurrent_renewals_are_not_lost(self, controller, store):
        """Test serialized mutations never lose an update."""
        record = await controller.issue("U", "pro")

        await asyncio.gather(
            *(controller.renew(record.key, timedelta(days=1)) for _ in range(20))
        )

        stored = await store.get(record.key)
        assert stored.expires_at == record.expires_at + timedelta(days=20)
        assert stored.version == record.version + 20

    @pytest.mark.asyncio
    async def test_issued_license_validates_immediately(self, controller, engine):
        """Test every freshly issued license is valid."""
        for level in SubscriptionLevel:
            record = await controller.issue("U", level)
            verdict = await engine.validate(record.key)
            assert verdict == Verdict.valid_for(level)

    @pytest.mark.asyncio
    async def test_records_are_never_deleted(self, controller, store):
        """Test revoked records stay in the store."""
        record = await controller.issue("U", "pro")
        await controller.revoke(record.key, "")

        stored = await store.get(record.key)
        assert isinstance(stored, LicenseRecord)
        assert stored.is_revoked
