"""
Error taxonomy for the Emergency SOS service.

Each error carries the HTTP status the API layer answers with.
"""

from fastapi import status


class EmergencyServiceError(Exception):
    """Base exception for emergency service failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestError(EmergencyServiceError):
    """Missing userId, unknown action or malformed request data."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class EmergencyDisabledError(EmergencyServiceError):
    """Trigger attempted while the user's SOS is switched off."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Emergency SOS is disabled"


class NotFoundError(EmergencyServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(EmergencyServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "An emergency is already active"
