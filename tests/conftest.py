"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone

import pytest

from core.domain.clock import FrozenClock
from core.domain.events import EventHandler
from core.domain.value_objects import SubscriptionLevel
from core.infrastructure.events import InMemoryEventBus
from licenses.application.services.lifecycle_controller import LifecycleController
from licenses.domain.license import LicenseRecord
from licenses.domain.license_key import KeyGenerator
from licenses.domain.services import ValidationEngine
from licenses.infrastructure.repositories.in_memory_license_store import InMemoryLicenseStore

START_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class RecordingHandler(EventHandler):
    """Event handler that remembers what it saw."""

    def __init__(self):
        self.events = []

    async def handle(self, event):
        self.events.append(event)


@pytest.fixture
def clock():
    """Fixture for a clock frozen at START_TIME."""
    return FrozenClock(START_TIME)


@pytest.fixture
def store():
    """Fixture for an empty in-memory LicenseStore."""
    return InMemoryLicenseStore()


@pytest.fixture
def key_generator():
    """Fixture for the default KeyGenerator."""
    return KeyGenerator()


@pytest.fixture
def event_bus():
    """Fixture for an isolated event bus."""
    return InMemoryEventBus()


@pytest.fixture
def recorded_events(event_bus):
    """Fixture subscribing a recording handler to every license event."""
    from core.infrastructure.event_handlers import LICENSE_EVENTS

    handler = RecordingHandler()
    for event_type in LICENSE_EVENTS:
        event_bus.subscribe(event_type, handler)
    return handler.events


@pytest.fixture
def controller(store, key_generator, clock, event_bus):
    """Fixture for a LifecycleController over the in-memory store."""
    return LifecycleController(
        store=store,
        key_generator=key_generator,
        clock=clock,
        event_bus=event_bus,
    )


@pytest.fixture
def engine(store, clock):
    """Fixture for a ValidationEngine over the in-memory store."""
    return ValidationEngine(store, clock=clock)


@pytest.fixture
def sample_record(key_generator):
    """Fixture for an active, unbound LicenseRecord valid for a year."""
    return LicenseRecord.create(
        key=key_generator.generate(),
        user_id="user-42",
        subscription_level=SubscriptionLevel.PRO,
        issued_at=START_TIME,
        expires_at=START_TIME.replace(year=2027),
    )


@pytest.fixture
def django_store():
    """Fixture for the Django ORM LicenseStore."""
    from licenses.infrastructure.repositories.django_license_store import DjangoLicenseStore

    return DjangoLicenseStore()


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()
