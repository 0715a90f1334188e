"""
Notification sink port (interface).

Write-only, best-effort channel for expiration warnings.
"""
from abc import ABC, abstractmethod
from datetime import datetime

from licenses.domain.license import LicenseRecord


class NotificationSink(ABC):
    """Abstract sink for license notifications."""

    @abstractmethod
    def notify_expiring(self, record: LicenseRecord, now: datetime) -> bool:
        """
        Warn the license owner that the license expires soon.

        Implementations must not raise; a failed delivery is reported
        through the return value and the logs.

        Args:
            record: License about to expire
            now: Current time

        Returns:
            True if the warning was handed off, False otherwise
        """
        pass
