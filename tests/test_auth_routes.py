"""HTTP tests for /api/auth/register, /api/auth/login and /api/auth/whoMI with a mocked user store."""

import unittest
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import jwt
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError

from patient_auth.api.deps import get_auth_service, get_token_service
from patient_auth.core.security import PasswordHasher, TokenService
from patient_auth.main import app
from patient_auth.models import User
from patient_auth.services.auth import AuthService

SECRET = "test-secret-key"


class _PgError(Exception):
    """Stand-in for a psycopg2 error: carries SQLSTATE and the violated constraint."""

    def __init__(self, pgcode: str, constraint_name: str | None = None) -> None:
        super().__init__(f"SQLSTATE {pgcode}")
        self.pgcode = pgcode
        self.diag = SimpleNamespace(constraint_name=constraint_name)

VALID_REGISTER_PAYLOAD = {
    "email": "test@example.com",
    "password": "password123",
    "fullName": "John Doe",
    "role": 1,
    "user_details": {
        "age": 30,
        "gender": "Male",
        "height_cm": 175,
        "weight_kg": 70,
        "phone": "1234567890",
        "address": "123 Test Street",
    },
}

VALID_LOGIN_PAYLOAD = {"email": "test@example.com", "password": "password123"}


class AuthRoutesTestCase(unittest.TestCase):
    """Wires the app to a MagicMock repository through dependency overrides."""

    def setUp(self) -> None:
        self.repository = MagicMock()
        self.hasher = PasswordHasher(rounds=4)
        self.tokens = TokenService(secret=SECRET)
        service = AuthService(self.repository, self.hasher, self.tokens)
        app.dependency_overrides[get_auth_service] = lambda: service
        app.dependency_overrides[get_token_service] = lambda: self.tokens
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _user(self, password: str = "password123") -> User:
        return User(
            id="user-id-123",
            email="test@example.com",
            password=self.hasher.hash(password),
            role=1,
        )

    def _auth_header(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


class TestRegister(AuthRoutesTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.repository.exists_by_email.return_value = False
        self.repository.create_with_details.side_effect = lambda user, details: [
            {"user_id": details.user_id}
        ]

    def test_register_success(self) -> None:
        response = self.client.post("/api/auth/register", json=VALID_REGISTER_PAYLOAD)

        self.assertEqual(response.status_code, 200)
        user, details = self.repository.create_with_details.call_args.args
        self.assertEqual(user.id, details.user_id)
        self.assertEqual(
            response.json(),
            {"command": "INSERT", "rowCount": 1, "rows": [{"user_id": user.id}]},
        )
        self.repository.exists_by_email.assert_called_once_with("test@example.com")

    def test_register_existing_user(self) -> None:
        self.repository.exists_by_email.return_value = True

        response = self.client.post("/api/auth/register", json=VALID_REGISTER_PAYLOAD)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "message": "User already exists"})
        self.repository.create_with_details.assert_not_called()

    def test_register_race_on_unique_email(self) -> None:
        self.repository.create_with_details.side_effect = IntegrityError(
            "INSERT INTO users", {}, _PgError("23505", "ix_users_email")
        )

        response = self.client.post("/api/auth/register", json=VALID_REGISTER_PAYLOAD)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "message": "User already exists"})

    def test_register_non_unique_integrity_error_is_server_error(self) -> None:
        self.repository.create_with_details.side_effect = IntegrityError(
            "INSERT INTO patient_details", {}, _PgError("23503", "fk_patient_details_user_id_users")
        )

        response = self.client.post("/api/auth/register", json=VALID_REGISTER_PAYLOAD)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"success": False, "message": "Server error during registration"},
        )

    def test_register_missing_fields(self) -> None:
        response = self.client.post("/api/auth/register", json={"email": "test@example.com"})

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["message"], "Validation error")
        self.assertIn('"password" is required', body["errors"])
        self.assertIn('"user_details" is required', body["errors"])
        self.repository.exists_by_email.assert_not_called()
        self.repository.create_with_details.assert_not_called()

    def test_register_without_body(self) -> None:
        response = self.client.post("/api/auth/register")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Validation error")
        self.assertTrue(response.json()["errors"])

    def test_register_invalid_role(self) -> None:
        response = self.client.post("/api/auth/register", json={**VALID_REGISTER_PAYLOAD, "role": 9})

        self.assertEqual(response.status_code, 400)
        self.repository.exists_by_email.assert_not_called()

    def test_register_store_failure(self) -> None:
        self.repository.exists_by_email.side_effect = OperationalError(
            "SELECT", {}, Exception("Database connection failed")
        )

        response = self.client.post("/api/auth/register", json=VALID_REGISTER_PAYLOAD)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(),
            {"success": False, "message": "Server error during registration"},
        )


class TestLogin(AuthRoutesTestCase):
    def test_login_success(self) -> None:
        self.repository.get_by_email.return_value = self._user()

        response = self.client.post("/api/auth/login", json=VALID_LOGIN_PAYLOAD)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Login successful")
        self.assertNotIn("password", body["data"]["user"])
        self.assertEqual(body["data"]["user"]["id"], "user-id-123")
        claims = self.tokens.decode(body["data"]["token"])
        self.assertEqual(
            {k: claims[k] for k in ("id", "email", "role")},
            {"id": "user-id-123", "email": "test@example.com", "role": 1},
        )

    def test_login_unknown_user(self) -> None:
        self.repository.get_by_email.return_value = None

        response = self.client.post("/api/auth/login", json=VALID_LOGIN_PAYLOAD)

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "message": "Invalid credentials"})

    def test_login_wrong_password(self) -> None:
        self.repository.get_by_email.return_value = self._user(password="something-else")

        response = self.client.post("/api/auth/login", json=VALID_LOGIN_PAYLOAD)

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "message": "Invalid credentials"})

    def test_login_missing_email(self) -> None:
        response = self.client.post("/api/auth/login", json={"password": "password123"})

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertEqual(response.json()["message"], "Validation error")
        self.repository.get_by_email.assert_not_called()

    def test_login_missing_password(self) -> None:
        response = self.client.post("/api/auth/login", json={"email": "test@example.com"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"], ['"password" is required'])

    def test_login_invalid_email_format(self) -> None:
        response = self.client.post(
            "/api/auth/login", json={"email": "invalid-email", "password": "password123"}
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_login_database_error(self) -> None:
        self.repository.get_by_email.side_effect = OperationalError(
            "SELECT", {}, Exception("Database connection failed")
        )

        response = self.client.post("/api/auth/login", json=VALID_LOGIN_PAYLOAD)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "message": "Server error during login"})


class TestWhoAmI(AuthRoutesTestCase):
    def test_no_token(self) -> None:
        response = self.client.get("/api/auth/whoMI")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"success": False, "message": "No token provided"})
        self.repository.get_identity.assert_not_called()

    def test_malformed_token(self) -> None:
        response = self.client.get("/api/auth/whoMI", headers=self._auth_header("garbage"))

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "message": "Invalid or expired token"})

    def test_non_bearer_scheme(self) -> None:
        token = self.tokens.issue("user-id-123", "test@example.com", 1)

        response = self.client.get("/api/auth/whoMI", headers={"Authorization": f"Basic {token}"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "message": "Invalid or expired token"})
        self.repository.get_identity.assert_not_called()

    def test_header_without_token_part(self) -> None:
        for value in ("garbage", "Bearer"):
            response = self.client.get("/api/auth/whoMI", headers={"Authorization": value})

            self.assertEqual(response.status_code, 403, value)
            self.assertEqual(response.json(), {"success": False, "message": "No token provided"})

    def test_signed_token_without_identity_claims(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "user-id-123", "iat": now, "exp": now + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )

        response = self.client.get("/api/auth/whoMI", headers=self._auth_header(token))

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "message": "Invalid or expired token"})
        self.repository.get_identity.assert_not_called()

    def test_signed_token_with_wrongly_typed_claims(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"id": 123, "email": "test@example.com", "role": "admin", "iat": now, "exp": now + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )

        response = self.client.get("/api/auth/whoMI", headers=self._auth_header(token))

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "message": "Invalid or expired token"})

    def test_expired_token(self) -> None:
        token = self.tokens.issue(
            "user-id-123", "test@example.com", 1, now=datetime.now(UTC) - timedelta(days=8)
        )

        response = self.client.get("/api/auth/whoMI", headers=self._auth_header(token))

        self.assertEqual(response.status_code, 401)
        self.repository.get_identity.assert_not_called()

    def test_token_from_other_secret(self) -> None:
        token = TokenService(secret="another-secret").issue("user-id-123", "test@example.com", 1)

        response = self.client.get("/api/auth/whoMI", headers=self._auth_header(token))

        self.assertEqual(response.status_code, 401)

    def test_deleted_user(self) -> None:
        self.repository.get_identity.return_value = None
        token = self.tokens.issue("user-id-123", "test@example.com", 1)

        response = self.client.get("/api/auth/whoMI", headers=self._auth_header(token))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "message": "User not found"})

    def test_existing_user(self) -> None:
        self.repository.get_identity.return_value = SimpleNamespace(
            id="user-id-123", email="test@example.com", role=1
        )
        token = self.tokens.issue("user-id-123", "test@example.com", 1)

        response = self.client.get("/api/auth/whoMI", headers=self._auth_header(token))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"success": True, "data": {"id": "user-id-123", "email": "test@example.com", "role": 1}},
        )
        self.repository.get_identity.assert_called_once_with("user-id-123")

    def test_store_failure(self) -> None:
        self.repository.get_identity.side_effect = OperationalError("SELECT", {}, Exception("down"))
        token = self.tokens.issue("user-id-123", "test@example.com", 1)

        response = self.client.get("/api/auth/whoMI", headers=self._auth_header(token))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "message": "Server error"})


if __name__ == "__main__":
    unittest.main()
