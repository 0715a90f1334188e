"""
ValidateLicenseHandler.

Handler for the check-in query. Runs the read-only validation engine
and, when it asks for one, performs the first-claim device binding
through the lifecycle controller.
"""
import logging

from core.domain.exceptions import AlreadyBoundError, LicenseRevokedError
from licenses.application.queries.validate_license import ValidateLicenseQuery
from licenses.application.services.lifecycle_controller import LifecycleController
from licenses.domain.license_key import mask_key
from licenses.domain.services import ValidationEngine
from licenses.domain.verdict import InvalidReason, Verdict

logger = logging.getLogger(__name__)


class ValidateLicenseHandler:
    """Handler for ValidateLicenseQuery."""

    def __init__(self, engine: ValidationEngine, controller: LifecycleController):
        """Initialize handler with the engine and the controller."""
        self.engine = engine
        self.controller = controller

    async def handle(self, query: ValidateLicenseQuery) -> Verdict:
        """
        Handle validate license query.

        Args:
            query: ValidateLicenseQuery

        Returns:
            Verdict without a pending bind request

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        verdict = await self.engine.validate(query.license_key, query.device_id)
        if verdict.bind_request is None:
            return verdict

        request = verdict.bind_request
        try:
            await self.controller.bind(request.key, request.device_id)
        except AlreadyBoundError:
            # Another device claimed the license between the read and the bind.
            logger.info("Lost first-claim race for license %s", mask_key(request.key))
            return Verdict.invalid(InvalidReason.DEVICE_MISMATCH)
        except LicenseRevokedError:
            return Verdict.invalid(InvalidReason.REVOKED)
        except ValueError as e:
            logger.warning("Rejected device for license %s: %s", mask_key(request.key), e)
            return Verdict.invalid(InvalidReason.DEVICE_MISMATCH)

        return verdict.without_bind_request()
