"""
Pydantic schemas for user requests and responses.
Handles profile updates, password changes and the account summary.
"""

from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from marketplace.models.user import UserRole
from marketplace.utils.validators import check_password_strength


class UserResponse(BaseModel):
    """User response schema (excluding sensitive data)."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(
        ...,
        description="User's unique identifier",
        examples=["123e4567-e89b-12d3-a456-426614174000"]
    )
    email: EmailStr = Field(..., description="User's email address", examples=["client@realestate.com"])
    first_name: Optional[str] = Field(None, description="User's first name", examples=["Jane"])
    last_name: Optional[str] = Field(None, description="User's last name", examples=["Doe"])
    full_name: str = Field(..., description="User's display name", examples=["Jane Doe"])
    roles: List[UserRole] = Field(
        default_factory=list,
        description="Roles held by the user",
        examples=[["Client"]]
    )
    is_active: bool = Field(..., description="Whether the user account is active", examples=[True])
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's own profile."""

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: Optional[str] = Field(None, max_length=100, description="New first name")
    last_name: Optional[str] = Field(None, max_length=100, description="New last name")

    @field_validator('first_name', 'last_name')
    @classmethod
    def strip_names(cls, v):
        """Trim surrounding whitespace."""
        return v.strip() if v is not None else v


class PasswordChangeRequest(BaseModel):
    """Schema for password change requests."""

    current_password: str = Field(
        ...,
        min_length=1,
        description="Current password for verification"
    )

    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password (minimum 8 characters, a letter and a number)"
    )

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        """Validate new password strength."""
        return check_password_strength(v)


class AccountSummary(BaseModel):
    """The caller's account with their listings and the requests they filed."""

    user: UserResponse
    properties: List[dict] = Field(default_factory=list, description="Listings owned by the user")
    requests: List[dict] = Field(default_factory=list, description="Requests filed by the user")
