from enum import Enum
from typing import Any, List, Optional

from .common import BaseSchema


class AnalysisType(str, Enum):
    CALL = "call_analysis"
    EMAIL = "email_analysis"
    WEBSITE = "website_analysis"
    GENERAL_ADVICE = "general_advice"
    EMERGENCY_GUIDANCE = "emergency_guidance"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class ContentAnalysisRequest(BaseSchema):
    type: AnalysisType
    content: str
    user_id: Optional[str] = None
    context: Optional[Any] = None


class ContentAnalysisResult(BaseSchema):
    analysis: str = ""
    risk_level: RiskLevel = RiskLevel.UNKNOWN
    recommendations: List[str] = []
