"""
Auth service.

Registration, login and current-user lookup. Raises AuthError subclasses for
every outcome the caller should see; anything else is an internal failure.
"""

import logging
import uuid

from sqlalchemy.exc import IntegrityError

from patient_auth.core.errors import AlreadyExists, InvalidCredentials, NotFound
from patient_auth.core.security import PasswordHasher, TokenService
from patient_auth.models import PatientDetails, Role, User
from patient_auth.repositories.users import UserRepository
from patient_auth.schemas.auth import (
    CurrentUser,
    InsertResult,
    LoginData,
    LoginRequest,
    RegisterRequest,
    UserPublic,
)

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for unique_violation, and the index guarding users.email.
UNIQUE_VIOLATION = "23505"
EMAIL_UNIQUE_INDEX = "ix_users_email"


def _is_duplicate_email(error: IntegrityError) -> bool:
    """True only for a unique violation on users.email; NOT NULL or FK failures are not duplicates."""
    orig = error.orig
    if getattr(orig, "pgcode", None) != UNIQUE_VIOLATION:
        return False
    constraint = getattr(getattr(orig, "diag", None), "constraint_name", None)
    return constraint is None or constraint == EMAIL_UNIQUE_INDEX


class AuthService:
    """Orchestrates the user store, the password hasher and the token service."""

    def __init__(
        self,
        repository: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self.repository = repository
        self.hasher = hasher
        self.tokens = tokens

    def register(self, payload: RegisterRequest) -> InsertResult:
        """
        Register a new user and their profile details.

        Args:
            payload: Validated registration request

        Returns:
            Result of the profile insert ({"command", "rowCount", "rows"})

        Raises:
            AlreadyExists: If the email is taken, including a concurrent registration
                that wins the race between the existence check and the insert
        """
        if self.repository.exists_by_email(payload.email):
            raise AlreadyExists()

        user_id = str(uuid.uuid4())
        role = payload.role if payload.role is not None else Role.USER
        user = User(
            id=user_id,
            email=payload.email,
            password=self.hasher.hash(payload.password),
            role=int(role),
        )
        profile = payload.user_details
        details = PatientDetails(
            user_id=user_id,
            fullname=payload.full_name,
            age=profile.age,
            gender=profile.gender,
            height_cm=profile.height_cm,
            weight_in_kg=profile.weight_kg,
            phone=profile.phone,
            address=profile.address,
        )

        try:
            rows = self.repository.create_with_details(user, details)
        except IntegrityError as e:
            if not _is_duplicate_email(e):
                raise
            logger.info("Registration rejected by unique email index")
            raise AlreadyExists() from e

        logger.info("User registered: user_id=%s role=%s", user_id, int(role))
        return InsertResult(rowCount=len(rows), rows=rows)

    def login(self, payload: LoginRequest) -> LoginData:
        """
        Verify credentials and issue a session token.

        Raises:
            InvalidCredentials: Unknown email or wrong password (same error for both)
        """
        user = self.repository.get_by_email(payload.email)
        if user is None or not self.hasher.verify(payload.password, user.password):
            logger.info("Login rejected")
            raise InvalidCredentials()

        token = self.tokens.issue(user.id, user.email, user.role)
        logger.info("Login succeeded: user_id=%s", user.id)
        return LoginData(user=UserPublic.model_validate(user), token=token)

    def current_user(self, user_id: str) -> CurrentUser:
        """
        Fetch {id, email, role} for an identity taken from a verified token.

        Raises:
            NotFound: The token outlived its user
        """
        row = self.repository.get_identity(user_id)
        if row is None:
            raise NotFound()
        return CurrentUser.model_validate(row)
