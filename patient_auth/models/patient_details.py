"""ORM model for the 1:1 profile extension of a user."""

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from patient_auth.models.base import Base


class PatientDetails(Base):
    """Profile captured at registration; never exists without its users row."""

    __tablename__ = "patient_details"

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    fullname = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(String(32), nullable=False)
    height_cm = Column(Float, nullable=False)
    weight_in_kg = Column(Float, nullable=False)
    phone = Column(String(32), nullable=False)
    address = Column(Text, nullable=False)

    user = relationship("User", back_populates="details")
