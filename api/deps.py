"""
Dependency injection utilities for API endpoints.
"""

from functools import lru_cache

from services.content_analysis_service import ContentAnalysisService, content_analysis_service
from services.emergency_service import EmergencyService, build_emergency_service


@lru_cache(maxsize=1)
def get_emergency_service() -> EmergencyService:
    """Process-wide emergency service built from settings."""
    return build_emergency_service()


def get_content_analysis_service() -> ContentAnalysisService:
    return content_analysis_service
