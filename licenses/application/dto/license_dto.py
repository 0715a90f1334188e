"""
License DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from licenses.domain.license import LicenseRecord
from licenses.domain.verdict import Verdict


@dataclass
class LicenseDTO:
    """DTO for license information. Never carries the key itself."""

    id: uuid.UUID
    user_id: str
    subscription_level: str
    status: str
    issued_at: datetime
    expires_at: datetime
    bound_device_id: Optional[str]
    revoked_at: Optional[datetime]
    revocation_reason: Optional[str]

    @classmethod
    def from_record(cls, record: LicenseRecord, now: datetime) -> "LicenseDTO":
        """
        Build DTO from a record.

        Args:
            record: LicenseRecord entity
            now: Current time, used to derive the effective status

        Returns:
            LicenseDTO
        """
        return cls(
            id=record.id,
            user_id=record.user_id,
            subscription_level=record.subscription_level.value,
            status=record.status_at(now).value,
            issued_at=record.issued_at,
            expires_at=record.expires_at,
            bound_device_id=record.bound_device_id,
            revoked_at=record.revoked_at,
            revocation_reason=record.revocation_reason,
        )


@dataclass
class IssueLicenseResponseDTO:
    """DTO for issue license response. The only place a key is returned."""

    key: str
    license: LicenseDTO


@dataclass
class VerdictDTO:
    """DTO for validation verdicts."""

    valid: bool
    subscription_level: Optional[str]
    reason: Optional[str]

    @classmethod
    def from_verdict(cls, verdict: Verdict) -> "VerdictDTO":
        return cls(
            valid=verdict.valid,
            subscription_level=(
                verdict.subscription_level.value if verdict.subscription_level else None
            ),
            reason=verdict.reason.value if verdict.reason else None,
        )
