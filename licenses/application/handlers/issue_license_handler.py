"""
IssueLicenseHandler.

Handles the issue license command.
"""

from datetime import timedelta

from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.dto.license_dto import IssueLicenseResponseDTO, LicenseDTO
from licenses.application.services.lifecycle_controller import LifecycleController


class IssueLicenseHandler:
    """Handler for IssueLicenseCommand."""

    def __init__(self, controller: LifecycleController):
        """Initialize handler with the lifecycle controller."""
        self.controller = controller

    async def handle(self, command: IssueLicenseCommand) -> IssueLicenseResponseDTO:
        """
        Handle issue license command.

        Args:
            command: IssueLicenseCommand

        Returns:
            IssueLicenseResponseDTO with the new key

        Raises:
            ValueError: If the tier or validity is invalid
            IssuanceFailedError: If no unique key could be generated
        """
        validity = None
        if command.validity_days is not None:
            if command.validity_days < 1:
                raise ValueError("Validity must be at least one day")
            try:
                validity = timedelta(days=command.validity_days)
            except OverflowError as e:
                raise ValueError("Validity is too large") from e

        record = await self.controller.issue(
            user_id=command.user_id,
            subscription_level=command.subscription_level,
            validity=validity,
        )

        return IssueLicenseResponseDTO(
            key=record.key,
            license=LicenseDTO.from_record(record, self.controller.clock.now()),
        )
