"""
Unit tests for the authentication service.

Tests cover:
- Password hashing and verification
- JWT creation, decoding and expiry
- Registration (duplicates, minimum password length)
- Login and token-to-user resolution
"""

import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt

from agriloop.config import get_settings
from agriloop.errors import AuthenticationError, DuplicateError, InvalidRequestError
from agriloop.models.auth import LoginRequest, RegisterRequest
from agriloop.models.user import Role


def registration(**overrides) -> RegisterRequest:
    data = {
        "name": "  Lakshmi Nair ",
        "email": "Lakshmi@Example.com",
        "password": "coconut123",
        "role": "farmer",
        "phone": "+919876543210",
    }
    data.update(overrides)
    return RegisterRequest(**data)


# ============================================================================
# PASSWORDS
# ============================================================================


class TestPasswordHashing:

    def test_hash_is_not_plaintext(self, auth_service):
        hashed = auth_service.hash_password("coconut123")

        assert hashed != "coconut123"
        assert hashed.startswith("$2")

    def test_verify(self, auth_service):
        hashed = auth_service.hash_password("coconut123")

        assert auth_service.verify_password("coconut123", hashed) is True
        assert auth_service.verify_password("wrong", hashed) is False

    def test_unparseable_hash_does_not_verify(self, auth_service):
        assert auth_service.verify_password("coconut123", "not-a-hash") is False


# ============================================================================
# TOKENS
# ============================================================================


class TestTokens:

    def test_claims(self, auth_service):
        token = auth_service.create_access_token("665f1c2e9b1e8a0012345678", Role.FARMER)
        settings = get_settings()

        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

        assert claims["sub"] == "665f1c2e9b1e8a0012345678"
        assert claims["role"] == "farmer"
        assert claims["exp"] - claims["iat"] == settings.jwt_access_token_expire_minutes * 60

    def test_decode_round_trip(self, auth_service):
        token = auth_service.create_access_token("abc", Role.CREATOR)
        payload = auth_service.decode_token(token)

        assert payload.sub == "abc"
        assert payload.role == Role.CREATOR

    def test_expired_token(self, auth_service):
        token = auth_service.create_access_token("abc", Role.FARMER, expires_delta=timedelta(seconds=-1))
        assert auth_service.decode_token(token) is None

    def test_wrong_secret(self, auth_service):
        now = datetime.now(timezone.utc)
        forged = jwt.encode(
            {"sub": "abc", "role": "farmer", "exp": int((now + timedelta(hours=1)).timestamp()), "iat": int(now.timestamp())},
            "another-secret-key-that-is-long-enough",
            algorithm="HS256",
        )
        assert auth_service.decode_token(forged) is None

    def test_missing_claims(self, auth_service):
        settings = get_settings()
        token = jwt.encode({"sub": "abc"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        assert auth_service.decode_token(token) is None

    def test_garbage(self, auth_service):
        assert auth_service.decode_token("not.a.jwt") is None


# ============================================================================
# REGISTRATION AND LOGIN
# ============================================================================


class TestRegister:

    async def test_register_normalises_and_hashes(self, auth_service, user_repo):
        token, user = await auth_service.register(registration())

        assert token
        assert user["name"] == "Lakshmi Nair"
        assert user["email"] == "lakshmi@example.com"
        assert user["role"] == "farmer"
        assert user["password_hash"] != "coconut123"
        assert user["earnings"] == {"total": 0, "pending": 0, "withdrawn": 0}
        assert user["is_verified"] is False

    async def test_duplicate_email(self, auth_service):
        await auth_service.register(registration())

        with pytest.raises(DuplicateError) as exc_info:
            await auth_service.register(registration(email="LAKSHMI@example.com"))

        assert exc_info.value.message == "User already exists"
        assert exc_info.value.status_code == 400

    async def test_configured_minimum_length(self, auth_service):
        auth_service.settings = auth_service.settings.model_copy(update={"password_min_length": 10})

        with pytest.raises(InvalidRequestError):
            await auth_service.register(registration(password="short12"))


class TestLogin:

    async def test_login(self, auth_service):
        await auth_service.register(registration())

        token, user = await auth_service.login(
            LoginRequest(email="lakshmi@example.com", password="coconut123")
        )

        assert user["email"] == "lakshmi@example.com"
        assert auth_service.decode_token(token).sub == user["id"]

    @pytest.mark.parametrize(
        "email,password",
        [
            ("lakshmi@example.com", "wrong-password"),
            ("nobody@example.com", "coconut123"),
        ],
    )
    async def test_invalid_credentials(self, auth_service, email, password):
        await auth_service.register(registration())

        with pytest.raises(AuthenticationError) as exc_info:
            await auth_service.login(LoginRequest(email=email, password=password))

        assert exc_info.value.message == "Invalid credentials"


class TestGetCurrentUser:

    async def test_resolves_user(self, auth_service):
        token, user = await auth_service.register(registration())

        current = await auth_service.get_current_user(token)

        assert current.id == user["id"]
        assert current.is_farmer()

    async def test_unknown_user(self, auth_service):
        token = auth_service.create_access_token("665f1c2e9b1e8a0012345678", Role.FARMER)
        assert await auth_service.get_current_user(token) is None

    async def test_invalid_token(self, auth_service):
        assert await auth_service.get_current_user("garbage") is None
