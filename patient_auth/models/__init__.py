"""SQLAlchemy ORM models."""

from patient_auth.models.base import Base
from patient_auth.models.patient_details import PatientDetails
from patient_auth.models.user import Role, User

__all__ = ["Base", "PatientDetails", "Role", "User"]
