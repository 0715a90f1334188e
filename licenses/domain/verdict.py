"""
Validation verdicts.

A verdict is plain data: validation outcomes are never raised.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.domain.value_objects import SubscriptionLevel


class InvalidReason(Enum):
    """Why a license failed validation."""

    NOT_FOUND = "not_found"
    REVOKED = "revoked"
    EXPIRED = "expired"
    DEVICE_MISMATCH = "device_mismatch"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BindRequest:
    """Ask the lifecycle controller to bind an unclaimed license."""

    key: str
    device_id: str


@dataclass(frozen=True)
class Verdict:
    """Result of validating a license key."""

    valid: bool
    subscription_level: Optional[SubscriptionLevel] = None
    reason: Optional[InvalidReason] = None
    bind_request: Optional[BindRequest] = None

    @classmethod
    def valid_for(
        cls,
        subscription_level: SubscriptionLevel,
        bind_request: Optional[BindRequest] = None,
    ) -> "Verdict":
        return cls(
            valid=True,
            subscription_level=subscription_level,
            bind_request=bind_request,
        )

    @classmethod
    def invalid(cls, reason: InvalidReason) -> "Verdict":
        return cls(valid=False, reason=reason)

    def without_bind_request(self) -> "Verdict":
        """Return the same verdict once its bind request has been handled."""
        if self.bind_request is None:
            return self
        return Verdict(
            valid=self.valid,
            subscription_level=self.subscription_level,
            reason=self.reason,
        )

    @property
    def result(self) -> str:
        """Short label used for metrics and logs."""
        return "valid" if self.valid else str(self.reason)
