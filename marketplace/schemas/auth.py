"""
Pydantic schemas for authentication requests and responses.
Handles registration, login, token refresh and the current user view.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from marketplace.models.user import UserRole
from marketplace.schemas.user import UserResponse
from marketplace.utils.validators import check_password_strength

# Roles a visitor may pick when signing up
SELF_SERVICE_ROLES = (UserRole.CLIENT, UserRole.AGENT)


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["agent@realestate.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="User's password",
        examples=["Agent@123"]
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class RegisterRequest(BaseModel):
    """Registration request schema."""

    email: EmailStr = Field(..., description="User's email address", examples=["new.user@example.com"])
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters, a letter and a number)",
        examples=["Secret123"]
    )
    first_name: Optional[str] = Field(None, max_length=100, examples=["Jane"])
    last_name: Optional[str] = Field(None, max_length=100, examples=["Doe"])
    role: UserRole = Field(
        UserRole.CLIENT,
        description="Client or Agent; Admin cannot be self-assigned",
        examples=["Client"]
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        """Validate password strength."""
        return check_password_strength(v)

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v not in SELF_SERVICE_ROLES:
            raise ValueError("Role must be Client or Agent")
        return v


class TokenResponse(BaseModel):
    """Token response schema."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds", examples=[1800])


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    refresh_token: str = Field(..., description="Valid refresh token")


class AccessTokenResponse(BaseModel):
    """Access token response schema."""

    access_token: str = Field(..., description="New JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds", examples=[1800])


class LoginResponse(TokenResponse):
    """Login response with the signed-in user."""

    user: UserResponse = Field(..., description="Authenticated user information")
