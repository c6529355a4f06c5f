"""Database repositories."""

from patient_auth.repositories.users import UserRepository

__all__ = ["UserRepository"]
