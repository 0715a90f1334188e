"""
Unit tests for the ValidationEngine domain service.
"""
from datetime import timedelta

import pytest

from core.domain.exceptions import StoreUnavailableError
from core.domain.value_objects import SubscriptionLevel
from licenses.domain.services import ValidationEngine
from licenses.domain.verdict import BindRequest, InvalidReason, Verdict
from licenses.infrastructure.repositories.in_memory_license_store import InMemoryLicenseStore


class UnavailableStore(InMemoryLicenseStore):
    """Store whose backend is unreachable."""

    async def get(self, key):
        raise StoreUnavailableError("connection refused")


class TestValidationEngine:
    """Tests for ValidationEngine."""

    @pytest.mark.asyncio
    async def test_unknown_key(self, engine):
        """Test unknown keys are not found, never valid."""
        verdict = await engine.validate("NOPE0-NOPE0-NOPE0-NOPE0-NOPE0-NOPE0", "D1")
        assert verdict == Verdict.invalid(InvalidReason.NOT_FOUND)

    @pytest.mark.asyncio
    async def test_empty_key(self, engine):
        """Test an empty key is treated as not found."""
        verdict = await engine.validate("")
        assert verdict.reason == InvalidReason.NOT_FOUND

    @pytest.mark.asyncio
    async def test_valid_without_device(self, engine, store, sample_record):
        """Test an active license validates with its tier."""
        await store.put(sample_record)

        verdict = await engine.validate(sample_record.key)

        assert verdict.valid is True
        assert verdict.subscription_level == SubscriptionLevel.PRO
        assert verdict.bind_request is None

    @pytest.mark.asyncio
    async def test_unbound_with_device_requests_bind(self, engine, store, sample_record):
        """Test the engine asks for a bind instead of writing."""
        await store.put(sample_record)

        verdict = await engine.validate(sample_record.key, "D1")

        assert verdict.valid is True
        assert verdict.bind_request == BindRequest(key=sample_record.key, device_id="D1")
        stored = await store.get(sample_record.key)
        assert stored.bound_device_id is None

    @pytest.mark.asyncio
    async def test_bound_same_device(self, engine, store, sample_record, clock):
        """Test the bound device validates."""
        await store.put(sample_record.bind_device("D1", clock.now()))

        verdict = await engine.validate(sample_record.key, "D1")

        assert verdict == Verdict.valid_for(SubscriptionLevel.PRO)

    @pytest.mark.asyncio
    async def test_bound_other_device(self, engine, store, sample_record, clock):
        """Test another device is rejected."""
        await store.put(sample_record.bind_device("D1", clock.now()))

        verdict = await engine.validate(sample_record.key, "D2")

        assert verdict.reason == InvalidReason.DEVICE_MISMATCH

    @pytest.mark.asyncio
    async def test_presented_device_is_stripped(self, engine, store, sample_record):
        """Test surrounding whitespace is dropped from the fingerprint."""
        await store.put(sample_record)

        verdict = await engine.validate(sample_record.key, "  D1  ")

        assert verdict.bind_request == BindRequest(key=sample_record.key, device_id="D1")

    @pytest.mark.asyncio
    async def test_blank_device_is_absent(self, engine, store, sample_record):
        """Test a whitespace fingerprint neither binds nor mismatches."""
        await store.put(sample_record)

        verdict = await engine.validate(sample_record.key, "   ")

        assert verdict == Verdict.valid_for(SubscriptionLevel.PRO)

    @pytest.mark.asyncio
    async def test_oversized_device_is_mismatch(self, engine, store, sample_record):
        """Test a fingerprint that is not a valid DeviceId cannot claim a license."""
        await store.put(sample_record)

        verdict = await engine.validate(sample_record.key, "D" * 256)

        assert verdict == Verdict.invalid(InvalidReason.DEVICE_MISMATCH)

    @pytest.mark.asyncio
    async def test_bound_without_device_is_valid(self, engine, store, sample_record, clock):
        """Test a check-in without a device skips the binding check."""
        await store.put(sample_record.bind_device("D1", clock.now()))

        verdict = await engine.validate(sample_record.key)

        assert verdict.valid is True

    @pytest.mark.asyncio
    async def test_expired(self, engine, store, sample_record, clock):
        """Test expiration is computed at read time and is stable."""
        await store.put(sample_record)
        clock.set(sample_record.expires_at + timedelta(seconds=1))

        first = await engine.validate(sample_record.key)
        second = await engine.validate(sample_record.key)

        assert first.reason == InvalidReason.EXPIRED
        assert second == first

    @pytest.mark.asyncio
    async def test_revoked_with_future_expiration(self, engine, store, sample_record, clock):
        """Test revoked wins even when not expired."""
        await store.put(sample_record.revoke("fraud", clock.now()))

        verdict = await engine.validate(sample_record.key)

        assert verdict.reason == InvalidReason.REVOKED

    @pytest.mark.asyncio
    async def test_revoked_checked_before_expired(self, engine, store, sample_record, clock):
        """Test check order: revoked before expired."""
        await store.put(sample_record.revoke("fraud", clock.now()))
        clock.set(sample_record.expires_at + timedelta(days=1))

        verdict = await engine.validate(sample_record.key, "D9")

        assert verdict.reason == InvalidReason.REVOKED

    @pytest.mark.asyncio
    async def test_expired_checked_before_device(self, engine, store, sample_record, clock):
        """Test check order: expired before device mismatch."""
        await store.put(sample_record.bind_device("D1", clock.now()))
        clock.set(sample_record.expires_at)

        verdict = await engine.validate(sample_record.key, "D2")

        assert verdict.reason == InvalidReason.EXPIRED

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, clock):
        """Test an unreachable store is an error, not a verdict."""
        engine = ValidationEngine(UnavailableStore(), clock=clock)

        with pytest.raises(StoreUnavailableError):
            await engine.validate("ABCDE-FGHJK-MNPQR-STVWX-YZ012-34567")


class TestVerdict:
    """Tests for Verdict."""

    def test_result_labels(self):
        """Test metric labels."""
        assert Verdict.valid_for(SubscriptionLevel.FREE).result == "valid"
        assert Verdict.invalid(InvalidReason.EXPIRED).result == "expired"

    def test_without_bind_request(self):
        """Test dropping a handled bind request."""
        verdict = Verdict.valid_for(
            SubscriptionLevel.FREE, bind_request=BindRequest(key="K", device_id="D")
        )
        assert verdict.without_bind_request() == Verdict.valid_for(SubscriptionLevel.FREE)
