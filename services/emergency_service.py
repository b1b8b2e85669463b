"""
Emergency SOS service.

Owns the per-user state machine:

    NoActiveEmergency --trigger--> Active --resolve--> NoActiveEmergency

Mutations for one user are serialised with a per-user lock; different
users never wait on each other.
"""

import threading
import weakref
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.config import settings as app_settings
from core.exceptions import EmergencyDisabledError, NotFoundError
from core.logging import get_logger
from repositories.active_emergency import ActiveEmergencyRepository
from repositories.emergency_history import EmergencyHistoryRepository
from repositories.emergency_record import EmergencyRecordRepository
from repositories.emergency_settings import EmergencySettingsRepository, generate_id
from repositories.storage import KeyValueStore, create_store
from schemas.emergency import (
    Emergency,
    EmergencyContact,
    EmergencySettings,
    EmergencyStatus,
    EmergencyStatusSummary,
    EmergencyTriggerResult,
    Location,
)
from services.auto_action_dispatcher import AutoActionDispatcher

logger = get_logger(__name__)

DEFAULT_TRIGGER_METHOD = "manual"
DEFAULT_RESOLUTION = "User resolved"


class EmergencyService:
    """Trigger, resolve and inspect a user's emergencies."""

    def __init__(
        self,
        settings_repo: EmergencySettingsRepository,
        records: EmergencyRecordRepository,
        active_repo: ActiveEmergencyRepository,
        history_repo: EmergencyHistoryRepository,
        dispatcher: AutoActionDispatcher,
        allow_overwrite: bool = False,
    ):
        self.settings_repo = settings_repo
        self.records = records
        self.active_repo = active_repo
        self.history_repo = history_repo
        self.dispatcher = dispatcher
        self.allow_overwrite = allow_overwrite

        # entries disappear once no caller holds the lock
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    # Settings and contacts

    def get_settings(self, user_id: str) -> EmergencySettings:
        return self.settings_repo.get(user_id)

    def update_settings(self, user_id: str, data: Dict[str, Any]) -> EmergencySettings:
        with self._user_lock(user_id):
            return self.settings_repo.update(user_id, data)

    def add_contact(self, user_id: str, data: Dict[str, Any]) -> EmergencyContact:
        with self._user_lock(user_id):
            return self.settings_repo.add_contact(user_id, data)

    def update_contact(self, user_id: str, contact_id: str, data: Dict[str, Any]) -> EmergencyContact:
        with self._user_lock(user_id):
            return self.settings_repo.update_contact(user_id, contact_id, data)

    # Queries

    def get_active(self, user_id: str) -> Optional[Emergency]:
        return self.active_repo.get_active(user_id)

    def get_history(self, user_id: str) -> List[Emergency]:
        return self.history_repo.list(user_id)

    def get_status(self, user_id: str) -> EmergencyStatusSummary:
        latest = self.history_repo.latest(user_id)
        return EmergencyStatusSummary(
            is_enabled=self.settings_repo.get(user_id).is_enabled,
            has_active_emergency=self.active_repo.has_active(user_id),
            last_triggered=latest.timestamp if latest else None,
        )

    # Transitions

    def trigger(
        self,
        user_id: str,
        trigger_method: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> EmergencyTriggerResult:
        """Start an emergency and plan its automatic notifications.

        Raises EmergencyDisabledError when SOS is switched off and
        ConflictError when one is already active (unless overwrite is
        allowed). Neither failure changes any state.
        """
        with self._user_lock(user_id):
            emergency_settings = self.settings_repo.get(user_id)
            if not emergency_settings.is_enabled:
                logger.warning("Emergency trigger rejected, SOS disabled", user_id=user_id)
                raise EmergencyDisabledError("Emergency SOS is disabled")

            now = datetime.now(timezone.utc)
            # Snapshot contacts and auto-actions so later edits don't touch this episode
            emergency = Emergency(
                id=generate_id(),
                user_id=user_id,
                trigger_method=trigger_method or DEFAULT_TRIGGER_METHOD,
                location=location,
                timestamp=now,
                status=EmergencyStatus.ACTIVE,
                contacts=[c.model_copy() for c in emergency_settings.contacts],
                auto_actions=emergency_settings.auto_actions.model_copy(),
            )

            self.active_repo.set_active(user_id, emergency, overwrite=self.allow_overwrite)
            self.history_repo.append(user_id, emergency)
            actions = self.dispatcher.plan(emergency, emergency_settings, now=now)

        logger.info(
            "Emergency SOS activated",
            user_id=user_id,
            emergency_id=emergency.id,
            trigger_method=emergency.trigger_method,
            has_location=location is not None,
            action_count=len(actions),
        )
        return EmergencyTriggerResult(emergency=emergency, actions=actions)

    def resolve(self, user_id: str, resolution: Optional[str] = None) -> Emergency:
        """Close the active emergency. Raises NotFoundError if there is none."""
        with self._user_lock(user_id):
            emergency = self.active_repo.get_active(user_id)
            if emergency is None:
                raise NotFoundError("No active emergency found")

            resolved = emergency.model_copy(update={
                "status": EmergencyStatus.RESOLVED,
                "resolved_at": datetime.now(timezone.utc),
                "resolution": resolution or DEFAULT_RESOLUTION,
            })
            # History points at this record, so it sees the resolution too
            self.records.save(resolved)
            self.active_repo.clear_active(user_id)

        logger.info("Emergency resolved", user_id=user_id, emergency_id=resolved.id)
        return resolved


def build_emergency_service(store: KeyValueStore = None) -> EmergencyService:
    """Wire repositories, dispatcher and service from settings."""
    store = store or create_store()
    prefix = app_settings.EMERGENCY_KEY_PREFIX
    records = EmergencyRecordRepository(store, prefix)
    return EmergencyService(
        settings_repo=EmergencySettingsRepository(store, prefix),
        records=records,
        active_repo=ActiveEmergencyRepository(store, records, prefix),
        history_repo=EmergencyHistoryRepository(store, records, prefix),
        dispatcher=AutoActionDispatcher(app_settings.EMERGENCY_DEFAULT_MESSAGE),
        allow_overwrite=app_settings.EMERGENCY_ALLOW_OVERWRITE,
    )
