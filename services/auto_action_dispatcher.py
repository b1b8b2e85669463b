"""
Auto-action planning for a triggered emergency.

Decides which notifications should go out (call, SMS, location share)
and to whom. Nothing is sent from here; delivery belongs to whatever
consumes the plan.
"""

from datetime import datetime
from typing import List, Optional

from core.config import settings as app_settings
from schemas.emergency import (
    CallAction,
    Emergency,
    EmergencyAction,
    EmergencyContact,
    EmergencySettings,
    LocationShareAction,
    SmsAction,
)


def select_call_target(contacts: List[EmergencyContact]) -> Optional[str]:
    """Phone of the first primary contact, else of the first contact."""
    primary = next((c for c in contacts if c.is_primary), None)
    if primary and primary.phone:
        return primary.phone
    if contacts:
        return contacts[0].phone or None
    return None


class AutoActionDispatcher:
    """Pure planner: same emergency and settings always give the same plan."""

    def __init__(self, default_message: str = None):
        self.default_message = default_message or app_settings.EMERGENCY_DEFAULT_MESSAGE

    def plan(
        self,
        emergency: Emergency,
        settings: EmergencySettings,
        now: Optional[datetime] = None,
    ) -> List[EmergencyAction]:
        # Planning happens at trigger time, so the emergency's own
        # timestamp is the dispatch time unless told otherwise.
        timestamp = now or emergency.timestamp
        auto_actions = settings.auto_actions
        contacts = settings.contacts
        actions: List[EmergencyAction] = []

        if auto_actions.call_enabled:
            actions.append(CallAction(
                target=select_call_target(contacts),
                timestamp=timestamp,
            ))

        if auto_actions.message_enabled:
            actions.append(SmsAction(
                target=[c.phone for c in contacts],
                message=auto_actions.custom_message or self.default_message,
                timestamp=timestamp,
            ))

        # No location, no share; the toggle alone is not enough
        if auto_actions.location_sharing_enabled and emergency.location is not None:
            actions.append(LocationShareAction(
                target=[c.model_copy() for c in contacts],
                location=emergency.location,
                timestamp=timestamp,
            ))

        return actions
