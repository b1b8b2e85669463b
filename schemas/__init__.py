"""
Pydantic schemas for the Emergency SOS backend.

Contains all API request/response schemas organized by module.
"""

from .common import *
from .emergency import *
from .content_analysis import *
from .responses import *
