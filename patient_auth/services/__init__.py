"""Business logic services."""

from patient_auth.services.auth import AuthService

__all__ = ["AuthService"]
