"""Core app configuration, database and security primitives."""

from patient_auth.core.config import get_settings, settings
from patient_auth.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
