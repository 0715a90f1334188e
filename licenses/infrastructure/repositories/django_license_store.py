"""
Django implementation of LicenseStore port.

This adapter converts between domain entities and Django ORM models.
"""
import logging
from datetime import datetime
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import DatabaseError, IntegrityError, transaction

from core.domain.exceptions import (
    DuplicateKeyError,
    LicenseNotFoundError,
    StoreUnavailableError,
)
from core.domain.value_objects import LicenseStatus, SubscriptionLevel
from core.metrics import store_errors_total
from licenses.domain.license import LicenseRecord
from licenses.domain.license_key import mask_key
from licenses.infrastructure.models import LicenseRecord as LicenseRecordModel
from licenses.ports.license_store import LicenseStore, Mutation, apply_mutation

logger = logging.getLogger(__name__)


class DjangoLicenseStore(LicenseStore):
    """
    Django ORM implementation of LicenseStore.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Serializes mutations per key with a row lock (select_for_update)
    4. Maps database failures to StoreUnavailableError
    """

    def _to_domain(self, model: LicenseRecordModel) -> LicenseRecord:
        """
        Convert Django model to domain entity.

        Args:
            model: Django LicenseRecord model

        Returns:
            LicenseRecord domain entity
        """
        revoked = model.status == LicenseStatus.REVOKED.value
        return LicenseRecord(
            id=model.id,
            key=model.key,
            user_id=model.user_id,
            subscription_level=SubscriptionLevel(model.subscription_level),
            issued_at=model.issued_at,
            expires_at=model.expires_at,
            status=LicenseStatus.REVOKED if revoked else LicenseStatus.ACTIVE,
            bound_device_id=model.bound_device_id or None,
            revoked_at=model.revoked_at,
            revocation_reason=model.revocation_reason if revoked else None,
            updated_at=model.updated_at,
            version=model.version,
        )

    def _apply(self, model: LicenseRecordModel, record: LicenseRecord) -> None:
        """Copy the mutable fields of a domain entity onto a model."""
        model.subscription_level = record.subscription_level.value
        model.status = record.status.value
        model.expires_at = record.expires_at
        model.bound_device_id = record.bound_device_id
        model.revoked_at = record.revoked_at
        model.revocation_reason = record.revocation_reason or ""
        model.updated_at = record.updated_at
        model.version = record.version

    @sync_to_async
    def put(self, record: LicenseRecord) -> LicenseRecord:
        """
        Insert a license record.

        Args:
            record: LicenseRecord entity to insert

        Returns:
            Stored license record
        """
        model = LicenseRecordModel(
            id=record.id,
            key=record.key,
            user_id=record.user_id,
            issued_at=record.issued_at,
        )
        self._apply(model, record)
        try:
            with transaction.atomic():
                model.save(force_insert=True)
        except IntegrityError as e:
            raise DuplicateKeyError(
                f"License key {mask_key(record.key)} already exists"
            ) from e
        except DatabaseError as e:
            store_errors_total.labels(operation="put").inc()
            logger.error("License store insert failed: %s", e, exc_info=True)
            raise StoreUnavailableError(f"License store insert failed: {e}") from e
        return self._to_domain(model)

    @sync_to_async
    def get(self, key: str) -> Optional[LicenseRecord]:
        """
        Find a license record by key.

        Args:
            key: License key string

        Returns:
            LicenseRecord entity or None if not found
        """
        try:
            model = LicenseRecordModel.objects.get(key=key)
            return self._to_domain(model)
        except LicenseRecordModel.DoesNotExist:
            return None
        except DatabaseError as e:
            store_errors_total.labels(operation="get").inc()
            logger.error("License store read failed: %s", e, exc_info=True)
            raise StoreUnavailableError(f"License store read failed: {e}") from e

    @sync_to_async
    def update(self, key: str, mutation: Mutation) -> LicenseRecord:
        """
        Apply a mutation under a row lock.

        Args:
            key: License key string
            mutation: Function from the current record to the new one

        Returns:
            The stored record after the mutation
        """
        try:
            with transaction.atomic():
                try:
                    model = LicenseRecordModel.objects.select_for_update().get(key=key)
                except LicenseRecordModel.DoesNotExist:
                    raise LicenseNotFoundError(f"License {mask_key(key)} not found")

                current = self._to_domain(model)
                updated = apply_mutation(current, mutation)
                if updated is None:
                    return current

                self._apply(model, updated)
                model.save()
                return self._to_domain(model)
        except DatabaseError as e:
            store_errors_total.labels(operation="update").inc()
            logger.error("License store update failed: %s", e, exc_info=True)
            raise StoreUnavailableError(f"License store update failed: {e}") from e

    @sync_to_async
    def find_expiring(
        self, start: datetime, end: datetime
    ) -> List[LicenseRecord]:
        """
        Find non-revoked records expiring in [start, end).

        Args:
            start: Window start (inclusive)
            end: Window end (exclusive)

        Returns:
            List of LicenseRecord entities
        """
        try:
            models = LicenseRecordModel.objects.filter(
                status=LicenseStatus.ACTIVE.value,
                expires_at__gte=start,
                expires_at__lt=end,
            ).order_by("expires_at")
            return [self._to_domain(model) for model in models]
        except DatabaseError as e:
            store_errors_total.labels(operation="find_expiring").inc()
            logger.error("License store query failed: %s", e, exc_info=True)
            raise StoreUnavailableError(f"License store query failed: {e}") from e
