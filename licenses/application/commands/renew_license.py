"""
RenewLicenseCommand.

Command to renew (extend) a license.
"""
from dataclasses import dataclass
from datetime import timedelta


@dataclass
class RenewLicenseCommand:
    """Command to extend a license by a duration."""

    license_key: str
    extension: timedelta
