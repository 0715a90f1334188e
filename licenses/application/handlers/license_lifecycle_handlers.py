"""
License lifecycle handlers.

Handlers for renew, revoke, device binding and tier change commands.
"""

from licenses.application.commands.bind_device import BindDeviceCommand, UnbindDeviceCommand
from licenses.application.commands.change_subscription_level import (
    ChangeSubscriptionLevelCommand,
)
from licenses.application.commands.renew_license import RenewLicenseCommand
from licenses.application.commands.revoke_license import RevokeLicenseCommand
from licenses.application.dto.license_dto import LicenseDTO
from licenses.application.services.lifecycle_controller import LifecycleController


class _LifecycleHandler:
    """Shared wiring for handlers that delegate to the controller."""

    def __init__(self, controller: LifecycleController):
        """Initialize handler with the lifecycle controller."""
        self.controller = controller

    def _to_dto(self, record) -> LicenseDTO:
        return LicenseDTO.from_record(record, self.controller.clock.now())


class RenewLicenseHandler(_LifecycleHandler):
    """Handler for RenewLicenseCommand."""

    async def handle(self, command: RenewLicenseCommand) -> LicenseDTO:
        """
        Handle renew license command.

        Args:
            command: RenewLicenseCommand

        Returns:
            Renewed license

        Raises:
            LicenseNotFoundError: If license not found
            LicenseRevokedError: If license is revoked
        """
        renewed = await self.controller.renew(command.license_key, command.extension)
        return self._to_dto(renewed)


class RevokeLicenseHandler(_LifecycleHandler):
    """Handler for RevokeLicenseCommand."""

    async def handle(self, command: RevokeLicenseCommand) -> LicenseDTO:
        """
        Handle revoke license command.

        Args:
            command: RevokeLicenseCommand

        Returns:
            Revoked license

        Raises:
            LicenseNotFoundError: If license not found
        """
        revoked = await self.controller.revoke(command.license_key, command.reason)
        return self._to_dto(revoked)


class BindDeviceHandler(_LifecycleHandler):
    """Handler for BindDeviceCommand."""

    async def handle(self, command: BindDeviceCommand) -> LicenseDTO:
        bound = await self.controller.bind(
            command.license_key, command.device_id, allow_rebind=command.allow_rebind
        )
        return self._to_dto(bound)


class UnbindDeviceHandler(_LifecycleHandler):
    """Handler for UnbindDeviceCommand."""

    async def handle(self, command: UnbindDeviceCommand) -> LicenseDTO:
        unbound = await self.controller.unbind(command.license_key)
        return self._to_dto(unbound)


class ChangeSubscriptionLevelHandler(_LifecycleHandler):
    """Handler for ChangeSubscriptionLevelCommand."""

    async def handle(self, command: ChangeSubscriptionLevelCommand) -> LicenseDTO:
        changed = await self.controller.change_tier(
            command.license_key, command.subscription_level
        )
        return self._to_dto(changed)
