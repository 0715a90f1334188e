"""
ChangeSubscriptionLevelCommand.

Command to upgrade or downgrade a license.
"""
from dataclasses import dataclass


@dataclass
class ChangeSubscriptionLevelCommand:
    """Command to move a license to another tier."""

    license_key: str
    subscription_level: str
