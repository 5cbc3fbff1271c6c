"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    RefreshTokenRequest,
    AccessTokenResponse,
    LoginResponse
)

# User schemas
from .user import (
    UserResponse,
    ProfileUpdate,
    PasswordChangeRequest,
    AccountSummary
)

# Property schemas
from .property import (
    PropertyBase,
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    parse_property_form
)

# Image schemas
from .image import (
    PropertyImageResponse,
    ImageUploadResponse
)

# Request schemas
from .request import (
    RequestCreate,
    RequestStatusUpdate,
    RequestResponse
)

# Message schemas
from .message import (
    MessageCreate,
    MessageReply,
    ReplyDraft,
    MessageResponse
)

# Admin schemas
from .admin import (
    DashboardResponse,
    UserDetailsResponse,
    RoleToggleRequest,
    StatisticsResponse
)

__all__ = [
    # Authentication
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "RefreshTokenRequest",
    "AccessTokenResponse",
    "LoginResponse",

    # User
    "UserResponse",
    "ProfileUpdate",
    "PasswordChangeRequest",
    "AccountSummary",

    # Property
    "PropertyBase",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyResponse",
    "parse_property_form",

    # Image
    "PropertyImageResponse",
    "ImageUploadResponse",

    # Request
    "RequestCreate",
    "RequestStatusUpdate",
    "RequestResponse",

    # Message
    "MessageCreate",
    "MessageReply",
    "ReplyDraft",
    "MessageResponse",

    # Admin
    "DashboardResponse",
    "UserDetailsResponse",
    "RoleToggleRequest",
    "StatisticsResponse"
]
