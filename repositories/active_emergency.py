from typing import Optional

from core.exceptions import ConflictError
from core.logging import get_logger
from repositories.emergency_record import EmergencyRecordRepository
from repositories.storage import KeyValueStore
from schemas.emergency import Emergency

logger = get_logger(__name__)


class ActiveEmergencyRepository:
    """At most one active emergency per user."""

    def __init__(self, store: KeyValueStore, records: EmergencyRecordRepository, prefix: str = "emergency"):
        self.store = store
        self.records = records
        self.prefix = prefix

    def _key(self, user_id: str) -> str:
        return f"{self.prefix}:active:{user_id}"

    def get_active(self, user_id: str) -> Optional[Emergency]:
        emergency_id = self.store.get(self._key(user_id))
        if emergency_id is None:
            return None
        return self.records.get(emergency_id)

    def has_active(self, user_id: str) -> bool:
        return self.store.get(self._key(user_id)) is not None

    def set_active(self, user_id: str, emergency: Emergency, overwrite: bool = False) -> None:
        """Mark an emergency active; raises ConflictError if one already is,
        unless overwrite is requested."""
        current_id = self.store.get(self._key(user_id))
        if current_id is not None:
            if not overwrite:
                raise ConflictError("An emergency is already active")
            logger.warning(
                "Overwriting active emergency",
                user_id=user_id,
                previous_emergency_id=current_id,
                emergency_id=emergency.id,
            )

        self.records.save(emergency)
        self.store.set(self._key(user_id), emergency.id)

    def clear_active(self, user_id: str) -> Optional[Emergency]:
        """Remove and return the user's active emergency, if any."""
        emergency = self.get_active(user_id)
        self.store.delete(self._key(user_id))
        return emergency
