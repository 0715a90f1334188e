"""
ValidateLicenseQuery.

Query sent by a client on each check-in.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class ValidateLicenseQuery:
    """Query to validate a license key, optionally from a device."""

    license_key: str
    device_id: Optional[str] = None
