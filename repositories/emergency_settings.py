import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import ValidationError

from core.config import settings
from core.exceptions import InvalidRequestError, NotFoundError
from core.logging import get_logger
from repositories.storage import KeyValueStore
from schemas.emergency import (
    AutoActions,
    EmergencyContact,
    EmergencyContactCreate,
    EmergencyContactInput,
    EmergencyContactUpdate,
    EmergencySettings,
    EmergencySettingsUpdate,
)

logger = get_logger(__name__)


def generate_id() -> str:
    """Creation-time ordered id: epoch millis plus a short random suffix."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def default_settings() -> EmergencySettings:
    return EmergencySettings(
        auto_actions=AutoActions(custom_message=settings.EMERGENCY_DEFAULT_MESSAGE),
    )


def _stamp_contact(contact: EmergencyContactInput) -> EmergencyContact:
    return EmergencyContact(
        **contact.model_dump(exclude={"id", "created_at"}),
        id=contact.id or generate_id(),
        created_at=contact.created_at or datetime.now(timezone.utc),
    )


class EmergencySettingsRepository:
    """Per-user emergency configuration and contact list."""

    def __init__(self, store: KeyValueStore, prefix: str = "emergency"):
        self.store = store
        self.prefix = prefix

    def _key(self, user_id: str) -> str:
        return f"{self.prefix}:settings:{user_id}"

    def _save(self, user_id: str, emergency_settings: EmergencySettings) -> None:
        self.store.set(self._key(user_id), emergency_settings.model_dump_json())

    def get(self, user_id: str) -> EmergencySettings:
        """Stored settings, or defaults for a user who never saved any."""
        raw = self.store.get(self._key(user_id))
        if raw is None:
            return default_settings()
        return EmergencySettings.model_validate_json(raw)

    def update(self, user_id: str, partial: Dict[str, Any]) -> EmergencySettings:
        """Shallow merge: each top-level key sent replaces that field whole."""
        current = self.get(user_id)
        try:
            changes = EmergencySettingsUpdate.model_validate(partial or {})
            merged = {**current.model_dump(), **changes.model_dump(exclude_unset=True)}
            if changes.contacts is not None:
                merged["contacts"] = [_stamp_contact(c).model_dump() for c in changes.contacts]
            updated = EmergencySettings.model_validate(merged)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid settings: {e.errors()[0].get('msg')}")

        self._save(user_id, updated)
        logger.info("Emergency settings updated", user_id=user_id, fields=sorted(changes.model_fields_set))
        return updated

    def add_contact(self, user_id: str, data: Dict[str, Any]) -> EmergencyContact:
        try:
            new_contact = EmergencyContactCreate.model_validate(data or {})
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid contact: {e.errors()[0].get('msg')}")

        contact = EmergencyContact(
            id=generate_id(),
            created_at=datetime.now(timezone.utc),
            **new_contact.model_dump(),
        )

        current = self.get(user_id)
        current.contacts.append(contact)
        self._save(user_id, current)

        logger.info("Emergency contact added", user_id=user_id, contact_id=contact.id)
        return contact

    def update_contact(self, user_id: str, contact_id: str, partial: Dict[str, Any]) -> EmergencyContact:
        current = self.get(user_id)
        for index, contact in enumerate(current.contacts):
            if contact.id == contact_id:
                break
        else:
            raise NotFoundError("Contact not found")

        try:
            changes = EmergencyContactUpdate.model_validate(partial or {})
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid contact: {e.errors()[0].get('msg')}")

        # id and createdAt are not part of the update schema, so they never change
        updated = contact.model_copy(update=changes.model_dump(exclude_unset=True, exclude_none=True))
        current.contacts[index] = updated
        self._save(user_id, current)

        logger.info("Emergency contact updated", user_id=user_id, contact_id=updated.id)
        return updated
