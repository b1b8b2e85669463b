from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from core.config import DEFAULT_EMERGENCY_MESSAGE
from .common import BaseSchema


WALL_CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class TriggerMethod(str, Enum):
    BUTTON = "button"
    POWER_BUTTON = "powerButton"
    VOLUME_BUTTON = "volumeButton"
    SHAKE = "shake"
    VOICE = "voice"


class EmergencyStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"


class Location(BaseModel):
    """GPS fix; clients may send lat/lng shorthand."""

    model_config = ConfigDict(populate_by_name=True)

    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lng", "lon"))


# Contacts

class EmergencyContactBase(BaseSchema):
    name: str
    phone: str
    relationship: str = ""
    is_primary: bool = False


class EmergencyContactCreate(EmergencyContactBase):
    pass


class EmergencyContactUpdate(BaseSchema):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None
    is_primary: Optional[bool] = None


class EmergencyContact(EmergencyContactBase):
    id: str
    created_at: Optional[datetime] = None


class EmergencyContactInput(EmergencyContactBase):
    """Contact sent inside a settings update; id and createdAt filled in when absent."""

    id: Optional[str] = None
    created_at: Optional[datetime] = None


# Settings

class AutoActions(BaseSchema):
    call_enabled: bool = True
    message_enabled: bool = True
    location_sharing_enabled: bool = True
    custom_message: str = DEFAULT_EMERGENCY_MESSAGE


class QuietHours(BaseSchema):
    enabled: bool = False
    start_time: str = Field(default="22:00", pattern=WALL_CLOCK_PATTERN)
    end_time: str = Field(default="07:00", pattern=WALL_CLOCK_PATTERN)


class EmergencySettings(BaseSchema):
    is_enabled: bool = True
    trigger_method: TriggerMethod = TriggerMethod.BUTTON
    contacts: List[EmergencyContact] = []
    auto_actions: AutoActions = Field(default_factory=AutoActions)
    quiet_hours: Optional[QuietHours] = Field(default_factory=QuietHours)


class EmergencySettingsUpdate(BaseSchema):
    """Partial settings; only the keys the client sent are applied."""

    is_enabled: Optional[bool] = None
    trigger_method: Optional[TriggerMethod] = None
    contacts: Optional[List[EmergencyContactInput]] = None
    auto_actions: Optional[AutoActions] = None
    quiet_hours: Optional[QuietHours] = None


# Emergencies

class Emergency(BaseSchema):
    id: str
    user_id: str
    trigger_method: str = "manual"
    location: Optional[Location] = None
    timestamp: datetime
    status: EmergencyStatus = EmergencyStatus.ACTIVE
    contacts: List[EmergencyContact] = []
    auto_actions: AutoActions
    resolved_at: Optional[datetime] = None
    resolution: Optional[str] = None


class EmergencyTriggerData(BaseSchema):
    trigger_method: Optional[str] = None
    location: Optional[Location] = None


class EmergencyResolveData(BaseSchema):
    resolution: Optional[str] = None


class EmergencyStatusSummary(BaseSchema):
    is_enabled: bool
    has_active_emergency: bool
    last_triggered: Optional[datetime] = None


# Auto-actions

class PlannedAction(BaseSchema):
    status: Literal["pending"] = "pending"
    timestamp: datetime


class CallAction(PlannedAction):
    type: Literal["call"] = "call"
    target: Optional[str] = None


class SmsAction(PlannedAction):
    type: Literal["sms"] = "sms"
    target: List[str] = []
    message: str


class LocationShareAction(PlannedAction):
    type: Literal["location_share"] = "location_share"
    target: List[EmergencyContact] = []
    location: Location


EmergencyAction = Annotated[
    Union[CallAction, SmsAction, LocationShareAction],
    Field(discriminator="type"),
]


class EmergencyTriggerResult(BaseSchema):
    emergency: Emergency
    actions: List[EmergencyAction] = []
