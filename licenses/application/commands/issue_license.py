"""
IssueLicenseCommand.

Command to issue a license key for a user.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class IssueLicenseCommand:
    """
    Command to issue a license.

    validity_days overrides the configured validity window.
    """

    user_id: str
    subscription_level: str
    validity_days: Optional[int] = None
