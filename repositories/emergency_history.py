from typing import List, Optional

from repositories.emergency_record import EmergencyRecordRepository
from repositories.storage import KeyValueStore
from schemas.emergency import Emergency


class EmergencyHistoryRepository:
    """Append-only, most-recent-first list of a user's emergencies."""

    def __init__(self, store: KeyValueStore, records: EmergencyRecordRepository, prefix: str = "emergency"):
        self.store = store
        self.records = records
        self.prefix = prefix

    def _key(self, user_id: str) -> str:
        return f"{self.prefix}:history:{user_id}"

    def append(self, user_id: str, emergency: Emergency) -> None:
        self.records.save(emergency)
        self.store.push_front(self._key(user_id), emergency.id)

    def list(self, user_id: str) -> List[Emergency]:
        return self.records.get_many(self.store.list_range(self._key(user_id)))

    def latest(self, user_id: str) -> Optional[Emergency]:
        ids = self.store.list_range(self._key(user_id))
        if not ids:
            return None
        return self.records.get(ids[0])
