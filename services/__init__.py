"""
Services module for the Emergency SOS backend.

Contains business logic and external service integrations.
"""

# Expose commonly used services for convenient imports
from .content_analysis_service import content_analysis_service  # noqa: F401
