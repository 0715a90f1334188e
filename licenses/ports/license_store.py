"""
License store port (interface).

This defines the contract for license record persistence.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from licenses.domain.license import LicenseRecord

Mutation = Callable[[LicenseRecord], LicenseRecord]


def apply_mutation(current: LicenseRecord, mutation: Mutation) -> Optional[LicenseRecord]:
    """
    Run a mutation against the current record.

    Shared by store implementations so every backend enforces the
    same rules on what a mutation may change.

    Args:
        current: Latest stored record
        mutation: Function from the current record to the new one

    Returns:
        The record to write with its version bumped, or None if the
        mutation changed nothing

    Raises:
        ValueError: If the mutation touched an immutable field
    """
    updated = mutation(current)
    if updated is current or updated == current:
        return None
    if (
        updated.id != current.id
        or updated.key != current.key
        or updated.user_id != current.user_id
        or updated.issued_at != current.issued_at
    ):
        raise ValueError("Mutation must not change the record identity")
    return replace(updated, version=current.version + 1)


class LicenseStore(ABC):
    """
    Abstract store for LicenseRecord entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    It holds no business policy: only storage with atomicity guarantees.
    Records are never deleted.
    """

    @abstractmethod
    async def put(self, record: LicenseRecord) -> LicenseRecord:
        """
        Insert a new license record.

        Args:
            record: LicenseRecord entity to insert

        Returns:
            Stored license record

        Raises:
            DuplicateKeyError: If a record with the same key exists
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[LicenseRecord]:
        """
        Find a license record by key.

        Reads never take a lock.

        Args:
            key: License key string

        Returns:
            LicenseRecord entity or None if not found

        Raises:
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def update(self, key: str, mutation: Mutation) -> LicenseRecord:
        """
        Atomically apply a mutation to one record.

        Mutations on the same key are serialized; the mutation always
        sees the latest stored version. If the mutation raises, the
        record is left untouched and the exception propagates. If it
        returns the record unchanged, nothing is written.

        Args:
            key: License key string
            mutation: Function from the current record to the new one

        Returns:
            The stored record after the mutation

        Raises:
            LicenseNotFoundError: If no record exists for key
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def find_expiring(
        self, start: datetime, end: datetime
    ) -> List[LicenseRecord]:
        """
        Find non-revoked records expiring in [start, end).

        Args:
            start: Window start (inclusive)
            end: Window end (exclusive)

        Returns:
            List of LicenseRecord entities ordered by expiration
        """
        pass
