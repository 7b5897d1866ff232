"""
Authentication service for user registration and JWT token management.

Provides:
- Password hashing and verification (passlib + bcrypt)
- JWT token creation and validation
- Registration and login
- Resolution of a bearer token to the calling user
"""

import structlog
from typing import Any, Dict, Optional, Tuple
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from jose import JWTError, jwt

from agriloop.config import get_settings
from agriloop.errors import AuthenticationError, DuplicateError, InvalidRequestError
from agriloop.models.auth import CurrentUser, LoginRequest, RegisterRequest, TokenPayload
from agriloop.models.user import Role
from agriloop.repositories.user_repo import UserRepository
from agriloop_shared.metrics import get_marketplace_metrics
from agriloop_shared.tracing import trace_function

logger = structlog.get_logger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, user_repo: UserRepository):
        """
        Initialize auth service.

        Args:
            user_repo: User repository
        """
        self.user_repo = user_repo
        self.settings = get_settings()

        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self.settings.password_bcrypt_rounds
        )

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password
        """
        try:
            hashed = self.pwd_context.hash(password)
            logger.debug("password_hashed")
            return hashed
        except Exception as e:
            logger.error("password_hash_failed", error=str(e))
            raise

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise (including unparseable hashes)
        """
        try:
            verified = self.pwd_context.verify(plain_password, hashed_password)
            logger.debug("password_verified", verified=verified)
            return verified
        except (ValueError, TypeError) as e:
            logger.error("password_verify_failed", error=str(e))
            return False

    def create_access_token(
        self,
        user_id: str,
        role: Role,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: User ID (becomes the ``sub`` claim)
            role: User role
            expires_delta: Custom expiration time (optional)

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.jwt_access_token_expire_minutes)

        now = datetime.now(timezone.utc)
        expire = now + expires_delta

        payload = {
            "sub": str(user_id),
            "role": Role(role).value,
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp())
        }

        token = jwt.encode(
            payload,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm
        )

        logger.debug(
            "access_token_created",
            user_id=str(user_id),
            expires_in=expires_delta.total_seconds()
        )
        return token

    def decode_token(self, token: str) -> Optional[TokenPayload]:
        """
        Decode and validate JWT token.

        Args:
            token: JWT token string

        Returns:
            Token payload or None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm]
            )
        except JWTError as e:
            logger.warning("token_decode_failed", error=str(e))
            return None

        try:
            token_payload = TokenPayload(
                sub=payload.get("sub"),
                role=payload.get("role"),
                exp=payload.get("exp"),
                iat=payload.get("iat")
            )
        except ValueError as e:
            logger.warning("token_claims_invalid", error=str(e))
            return None

        logger.debug("token_decoded", user_id=token_payload.sub)
        return token_payload

    def _issue(self, user: Dict[str, Any]) -> str:
        return self.create_access_token(user_id=user["id"], role=user["role"])

    @trace_function("auth.register")
    async def register(self, request: RegisterRequest) -> Tuple[str, Dict[str, Any]]:
        """
        Register a new user.

        Returns:
            (token, user) pair

        Raises:
            DuplicateError: If the email is already registered
            InvalidRequestError: If the password is shorter than configured
        """
        if len(request.password) < self.settings.password_min_length:
            raise InvalidRequestError(
                f"Password must be at least {self.settings.password_min_length} characters"
            )

        if await self.user_repo.get_user_by_email(request.email):
            logger.warning("registration_failed_email_taken", email=request.email)
            raise DuplicateError("User already exists")

        try:
            user = await self.user_repo.create_user(
                name=request.name,
                email=request.email,
                password_hash=self.hash_password(request.password),
                role=request.role.value,
                phone=request.phone,
                location=request.location.model_dump(exclude_none=True) if request.location else None,
                profile=request.profile.model_dump(exclude_none=True) if request.profile else None,
            )
        except ValueError:
            # lost a race with a concurrent registration of the same email
            raise DuplicateError("User already exists")

        get_marketplace_metrics().users_registered.labels(role=request.role.value).inc()
        logger.info("user_registered", user_id=user["id"], role=request.role.value)
        return self._issue(user), user

    async def authenticate_user(self, login_request: LoginRequest) -> Optional[Dict[str, Any]]:
        """
        Authenticate user with email and password.

        Returns:
            User if authenticated, None otherwise
        """
        user = await self.user_repo.get_user_by_email(login_request.email)

        if not user:
            logger.warning("authentication_failed_user_not_found", email=login_request.email)
            return None

        if not self.verify_password(login_request.password, user.get("password_hash", "")):
            logger.warning("authentication_failed_invalid_password", email=login_request.email)
            return None

        logger.info("user_authenticated", user_id=user["id"])
        return user

    @trace_function("auth.login")
    async def login(self, login_request: LoginRequest) -> Tuple[str, Dict[str, Any]]:
        """
        Login user and create access token.

        Raises:
            AuthenticationError: On unknown email or wrong password
        """
        user = await self.authenticate_user(login_request)
        if not user:
            raise AuthenticationError("Invalid credentials")

        logger.info("login_success", user_id=user["id"])
        return self._issue(user), user

    async def get_current_user(self, token: str) -> Optional[CurrentUser]:
        """
        Get current user from JWT token.

        The role is read from the stored user, not the token, so a token
        never outlives a role change.

        Returns:
            Current user or None if the token is invalid or the user is gone
        """
        payload = self.decode_token(token)
        if not payload:
            logger.warning("get_current_user_failed_invalid_token")
            return None

        user = await self.user_repo.get_user_by_id(payload.sub)
        if not user:
            logger.warning("get_current_user_failed_user_not_found", user_id=payload.sub)
            return None

        current_user = CurrentUser.model_validate(user)
        logger.debug("current_user_retrieved", user_id=current_user.id)
        return current_user
