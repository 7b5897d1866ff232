"""
Authentication models.

Provides Pydantic schemas for:
- Registration and login requests
- JWT token payloads
- The authenticated caller injected into handlers
"""

from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from agriloop.models.common import APIModel
from agriloop.models.user import Profile, Role, UserLocation, UserResponse


class RegisterRequest(APIModel):
    """Registration request schema."""
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    email: EmailStr = Field(
        ...,
        description="Email address (stored lowercase)"
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (minimum 6 characters)"
    )
    role: Role = Field(
        ...,
        description="farmer or creator"
    )
    phone: str = Field(
        ...,
        min_length=5,
        max_length=20,
        description="Contact phone number"
    )
    location: Optional[UserLocation] = None
    profile: Optional[Profile] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Trim surrounding whitespace; reject blank names."""
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Lakshmi Nair",
                "email": "lakshmi@example.com",
                "password": "coconut123",
                "role": "farmer",
                "phone": "+919876543210",
                "location": {"address": "Thrissur, Kerala"}
            }
        }
    }


class LoginRequest(APIModel):
    """Login request schema."""
    email: EmailStr = Field(
        ...,
        description="Email address"
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Password"
    )

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class AuthResponse(APIModel):
    """Returned by register and login."""
    message: str
    token: str = Field(..., min_length=10, description="JWT bearer token")
    user: UserResponse


class TokenPayload(APIModel):
    """
    JWT token payload/claims.

    Contains user identity and role embedded in the JWT token.
    """
    sub: str = Field(..., description="Subject (user ID)")
    role: Role = Field(..., description="User role at issue time")
    exp: int = Field(..., description="Expiration timestamp (Unix epoch)")
    iat: int = Field(..., description="Issued at timestamp (Unix epoch)")


class CurrentUser(APIModel):
    """
    Current authenticated user model.

    Used in request handlers to represent the authenticated user
    making the request. Injected via dependency injection.
    """
    id: str
    name: str
    email: str
    role: Role
    phone: Optional[str] = None

    def has_role(self, role: Role) -> bool:
        """
        Check if user has a specific role.

        Args:
            role: Role to check

        Returns:
            True if user has the role, False otherwise
        """
        return self.role == role

    def has_any_role(self, roles: List[Role]) -> bool:
        """Check if user has any of the specified roles."""
        return self.role in roles

    def is_farmer(self) -> bool:
        return self.has_role(Role.FARMER)

    def is_creator(self) -> bool:
        return self.has_role(Role.CREATOR)
