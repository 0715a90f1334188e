"""
In-memory implementation of LicenseStore port.

Suitable for development and tests. Records are immutable, so reads
return whatever instance is currently stored without locking.
Intended to be used from a single event loop.
"""
import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from core.domain.exceptions import (
    DuplicateKeyError,
    LicenseNotFoundError,
    StoreUnavailableError,
)
from licenses.domain.license import LicenseRecord
from licenses.domain.license_key import mask_key
from licenses.ports.license_store import LicenseStore, Mutation, apply_mutation

logger = logging.getLogger(__name__)


class InMemoryLicenseStore(LicenseStore):
    """
    In-memory license store.

    Mutations hold a per-key asyncio.Lock; waiting for it is bounded
    by lock_timeout so a stuck writer surfaces as StoreUnavailableError.
    """

    def __init__(self, lock_timeout: float = 5.0):
        """
        Initialize the store.

        Args:
            lock_timeout: Seconds to wait for a per-key lock
        """
        self._records: Dict[str, LicenseRecord] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_timeout = lock_timeout

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks.setdefault(key, asyncio.Lock())
        return lock

    async def put(self, record: LicenseRecord) -> LicenseRecord:
        if record.key in self._records:
            raise DuplicateKeyError(f"License key {mask_key(record.key)} already exists")
        self._records[record.key] = record
        logger.debug("Stored license %s", record.id)
        return record

    async def get(self, key: str) -> Optional[LicenseRecord]:
        return self._records.get(key)

    async def update(self, key: str, mutation: Mutation) -> LicenseRecord:
        if key not in self._records:
            raise LicenseNotFoundError(f"License {mask_key(key)} not found")

        lock = self._lock_for(key)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self._lock_timeout)
        except asyncio.TimeoutError as e:
            raise StoreUnavailableError(
                f"Timed out waiting for license {mask_key(key)}"
            ) from e

        try:
            current = self._records[key]
            updated = apply_mutation(current, mutation)
            if updated is None:
                return current
            self._records[key] = updated
            return updated
        finally:
            lock.release()

    async def find_expiring(
        self, start: datetime, end: datetime
    ) -> List[LicenseRecord]:
        matches = [
            record
            for record in self._records.values()
            if not record.is_revoked and start <= record.expires_at < end
        ]
        return sorted(matches, key=lambda record: record.expires_at)

    def __len__(self) -> int:
        return len(self._records)
