"""ORM model for user accounts (identity, credentials and role)."""

from enum import IntEnum

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from patient_auth.models.base import Base


class Role(IntEnum):
    """Integer role carried in the users table and in session tokens."""

    USER = 1
    ADMIN = 2


class User(Base):
    """
    User account for JWT authentication.

    id is a UUID4 string generated by the service; email is unique and
    compared case-sensitively. password holds the bcrypt hash only.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    role = Column(Integer, nullable=False, default=int(Role.USER))
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    details = relationship(
        "PatientDetails",
        back_populates="user",
        uselist=False,
        passive_deletes=True,
    )
