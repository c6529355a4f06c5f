"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

# Bcrypt cost (rounds). Fixed work factor for every stored password hash.
BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72

# Claims every session token must carry besides the registered iat/exp.
IDENTITY_CLAIMS = ("id", "email", "role")


class PasswordHasher:
    """One-way adaptive hash for stored credentials."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Do not store plain passwords."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """Verify a plain password against a stored hash (constant-time compare)."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


class TokenService:
    """
    Issue and verify signed, time-limited bearer tokens.

    The secret is symmetric: the same value signs and verifies.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 7 * 24 * 60) -> None:
        if not secret:
            raise ValueError("Token secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_delta = timedelta(minutes=expire_minutes)

    def issue(self, user_id: str, email: str, role: int, now: datetime | None = None) -> str:
        """Create a JWT with id, email, role, iat and exp."""
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            "id": user_id,
            "email": email,
            "role": int(role),
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Decode and validate a JWT; return its payload (id, email, role, iat, exp).
        Raises jwt.PyJWTError on invalid, tampered or expired token.
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self.algorithm],
            options={"require": ["exp", "iat", *IDENTITY_CLAIMS]},
        )
