from typing import List, Optional

from core.logging import get_logger
from repositories.storage import KeyValueStore
from schemas.emergency import Emergency

logger = get_logger(__name__)


class EmergencyRecordRepository:
    """Canonical copy of every emergency, keyed by emergency id.

    The active registry and the history log only hold ids pointing here,
    so an update made on resolve is visible through both.
    """

    def __init__(self, store: KeyValueStore, prefix: str = "emergency"):
        self.store = store
        self.prefix = prefix

    def _key(self, emergency_id: str) -> str:
        return f"{self.prefix}:record:{emergency_id}"

    def save(self, emergency: Emergency) -> Emergency:
        self.store.set(self._key(emergency.id), emergency.model_dump_json())
        return emergency

    def get(self, emergency_id: str) -> Optional[Emergency]:
        raw = self.store.get(self._key(emergency_id))
        if raw is None:
            return None
        return Emergency.model_validate_json(raw)

    def get_many(self, emergency_ids: List[str]) -> List[Emergency]:
        emergencies = []
        for emergency_id in emergency_ids:
            emergency = self.get(emergency_id)
            if emergency is None:
                logger.warning("Dangling emergency reference", emergency_id=emergency_id)
                continue
            emergencies.append(emergency)
        return emergencies
