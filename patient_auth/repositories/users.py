"""
User repository.

Handles database operations for the users and patient_details tables.
"""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from patient_auth.models import PatientDetails, User


class UserRepository:
    """Repository for User and PatientDetails database operations."""

    def __init__(self, session: Session):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy session bound to the pooled engine
        """
        self.session = session

    def get_by_email(self, email: str) -> User | None:
        """
        Get user by exact (case-sensitive) email match.

        Returns:
            User instance if found, None otherwise
        """
        return self.session.query(User).filter(User.email == email).first()

    def exists_by_email(self, email: str) -> bool:
        """Check if a user with the given email exists."""
        row = self.session.query(User.id).filter(User.email == email).first()
        return row is not None

    def get_identity(self, user_id: str) -> Any | None:
        """
        Get the (id, email, role) projection of a user.

        Returns:
            Row with id, email and role attributes, or None if the user is gone
        """
        return (
            self.session.query(User.id, User.email, User.role)
            .filter(User.id == user_id)
            .first()
        )

    def create_with_details(self, user: User, details: PatientDetails) -> list[dict[str, Any]]:
        """
        Insert a user and its profile in one transaction, user first.

        Args:
            user: New User (id already assigned)
            details: Its PatientDetails, keyed by the same id

        Returns:
            Inserted profile rows as [{"user_id": ...}]

        Raises:
            sqlalchemy.exc.IntegrityError: email already taken (checked by the store at flush)
            sqlalchemy.exc.SQLAlchemyError: any other store failure; nothing is persisted
        """
        try:
            self.session.add(user)
            self.session.flush()
            self.session.add(details)
            self.session.flush()
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return [{"user_id": details.user_id}]
