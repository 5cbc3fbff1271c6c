"""
User model with authentication and role management.
Handles marketplace accounts for clients, agents and administrators.
"""

from sqlalchemy import String, Boolean, Integer, ForeignKey, UniqueConstraint, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from marketplace.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
import enum
import uuid
from typing import FrozenSet, List, Optional

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    ADMIN = "Admin"
    AGENT = "Agent"
    CLIENT = "Client"


class UserRoleAssignment(Base):
    """One role held by one user. A user may hold several roles."""

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole),
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<UserRoleAssignment(user_id={self.user_id}, role={self.role})>"


class User(Base):
    """
    User model for authentication and authorization.
    Owns properties, files requests and exchanges messages with other users.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - stored lower-cased, unique"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    first_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True
    )

    last_name: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the user account is active"
    )

    session_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Bumped to invalidate every token issued before"
    )

    role_assignments: Mapped[List["UserRoleAssignment"]] = relationship(
        "UserRoleAssignment",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized, lower-cased email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Raises:
            ValueError: If the password is shorter than 8 characters
        """
        if not password or len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return pwd_context.verify(password, self.hashed_password)

    @property
    def roles(self) -> FrozenSet[UserRole]:
        """Roles currently held by the user."""
        return frozenset(assignment.role for assignment in self.role_assignments)

    @property
    def full_name(self) -> str:
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts) if parts else self.email

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excluding sensitive data).

        Returns:
            Dictionary representation of user
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "roles": sorted(role.value for role in self.roles),
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
