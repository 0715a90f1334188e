"""
App configuration for License Key Service.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class LicenseKeyServiceConfig(AppConfig):
    """App configuration for LicenseKeyService."""

    name = "LicenseKeyService"
    verbose_name = "License Key Service"

    def ready(self):
        """Register event handlers once apps are loaded."""
        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()
        logger.debug("License Key Service ready")
