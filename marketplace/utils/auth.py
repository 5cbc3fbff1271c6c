"""
Authentication utilities for JWT token management.
Provides JWT token generation and validation with role and session claims.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Dict, Any
from jose import JWTError, jwt
from marketplace.config import settings
from marketplace.models.user import UserRole
import uuid


class TokenPayload:
    """JWT token payload structure."""

    def __init__(
        self,
        user_id: str,
        email: str,
        roles: List[str],
        session_version: int,
        exp: datetime
    ):
        self.user_id = user_id
        self.email = email
        self.roles = roles
        self.session_version = session_version
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from dictionary."""
        return cls(
            user_id=data["sub"],
            email=data["email"],
            roles=list(data.get("roles", [])),  # Roles are omitted from refresh tokens
            session_version=int(data.get("ver", 0)),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )

    @property
    def user_uuid(self) -> uuid.UUID:
        return uuid.UUID(self.user_id)


def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {**claims, "exp": now + expires_delta, "iat": now}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    roles: Iterable[UserRole],
    session_version: int = 0,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create JWT access token with user claims.

    Args:
        user_id: User's UUID
        email: User's email address
        roles: Roles held by the user
        session_version: Current session version of the user
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    claims = {
        "sub": str(user_id),  # Subject (user ID)
        "email": email,
        "roles": sorted(UserRole(role).value for role in roles),
        "ver": session_version,
        "type": "access"
    }
    return _encode(claims, expires_delta or timedelta(minutes=settings.access_token_expire_minutes))


def create_refresh_token(
    user_id: uuid.UUID,
    email: str,
    session_version: int = 0,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create JWT refresh token.

    Args:
        user_id: User's UUID
        email: User's email address
        session_version: Current session version of the user
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT refresh token string
    """
    claims = {
        "sub": str(user_id),
        "email": email,
        "ver": session_version,
        "type": "refresh"
    }
    return _encode(claims, expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days))


def verify_token(token: str, token_type: str = "access") -> TokenPayload:
    """
    Verify and decode JWT token.

    Args:
        token: JWT token string
        token_type: Expected token type ("access" or "refresh")

    Returns:
        TokenPayload if valid

    Raises:
        ExpiredSignatureError: If the token has expired
        JWTError: If token is otherwise invalid
    """
    payload = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm]
    )

    if payload.get("type") != token_type:
        raise JWTError(f"Invalid token type. Expected {token_type}")

    if not payload.get("sub") or not payload.get("email"):
        raise JWTError("Invalid token payload")

    try:
        return TokenPayload.from_dict(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise JWTError(f"Token validation error: {str(e)}")
