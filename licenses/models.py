"""
Model registry for the licenses app.

Django discovers models through ``<app>.models``; the model itself
lives with the other infrastructure adapters.
"""
from licenses.infrastructure.models import LicenseRecord  # noqa: F401
