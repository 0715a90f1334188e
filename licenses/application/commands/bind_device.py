"""
Device binding commands.
"""
from dataclasses import dataclass


@dataclass
class BindDeviceCommand:
    """Command to bind a license to a device."""

    license_key: str
    device_id: str
    allow_rebind: bool = False


@dataclass
class UnbindDeviceCommand:
    """Command to clear a license's device binding."""

    license_key: str
