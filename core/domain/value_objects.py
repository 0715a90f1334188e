"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True, eq=False)
class DeviceId(ValueObject):
    """Device fingerprint presented by a client on check-in."""

    value: str

    def __post_init__(self):
        """Validate device fingerprint."""
        if not self.value or len(self.value.strip()) == 0:
            raise ValueError("Device identifier cannot be empty")
        if len(self.value) > 255:
            raise ValueError("Device identifier too long")

    def __str__(self) -> str:
        """Return fingerprint as string."""
        return self.value


class LicenseStatus(Enum):
    """
    License status value object.

    Only ACTIVE and REVOKED are ever stored. EXPIRED is derived from
    the expiration timestamp at read time.
    """

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value


class SubscriptionLevel(Enum):
    """Subscription tier a license grants."""

    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"

    def __str__(self) -> str:
        """Return level as string."""
        return self.value
