"""
Shared pytest fixtures.

Environment is pinned before any application module reads settings.
"""

import os

os.environ.setdefault("ENABLE_FILE_LOGGING", "false")
os.environ.setdefault("ENABLE_REQUEST_LOGGING", "false")
os.environ.setdefault("EMERGENCY_STORAGE_BACKEND", "memory")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from api.deps import get_emergency_service
from main import app
from repositories.storage import InMemoryKeyValueStore
from schemas.emergency import AutoActions, Emergency, EmergencyContact, EmergencySettings
from services.emergency_service import build_emergency_service


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def service(store):
    return build_emergency_service(store)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_emergency_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def family_contacts():
    return [
        EmergencyContact(id="c1", name="Mother", phone="090-1111-2222", relationship="mother", is_primary=True),
        EmergencyContact(id="c2", name="Brother", phone="090-3333-4444", relationship="brother"),
    ]


@pytest.fixture
def family_settings(family_contacts):
    return EmergencySettings(
        is_enabled=True,
        contacts=family_contacts,
        auto_actions=AutoActions(
            call_enabled=True,
            message_enabled=True,
            location_sharing_enabled=True,
            custom_message="help",
        ),
    )


@pytest.fixture
def make_emergency():
    def _make(settings: EmergencySettings, location=None) -> Emergency:
        return Emergency(
            id="1718000000000-abc123",
            user_id="user-1",
            location=location,
            timestamp=datetime(2024, 6, 10, 9, 30, tzinfo=timezone.utc),
            contacts=settings.contacts,
            auto_actions=settings.auto_actions,
        )
    return _make
