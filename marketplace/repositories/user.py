"""
User repository for authentication and user management operations.
Provides secure user operations with password handling and role assignments.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from marketplace.repositories.base import BaseRepository
from marketplace.models.user import User, UserRole, UserRoleAssignment
from typing import Optional, List, Dict, Any, Iterable
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication support.
    Handles secure user operations and role assignments.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any], roles: Iterable[UserRole] = ()) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, password
                      Optional: first_name, last_name, is_active
            roles: Roles granted to the new account

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the email is taken
            Exception: If database operation fails
        """
        try:
            email = User.validate_email_format(user_data["email"])

            if await self.get_by_email(email):
                raise ValueError(f"User with email {email} already exists")

            password = user_data.pop("password")

            user = User(
                email=email,
                hashed_password=User.hash_password(password),
                first_name=user_data.get("first_name"),
                last_name=user_data.get("last_name"),
                is_active=user_data.get("is_active", True),
            )
            user.role_assignments = [UserRoleAssignment(role=UserRole(role)) for role in set(roles)]

            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)

            logger.info(f"Created user: {user.email} (ID: {user.id})")
            return user
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            user = result.scalar_one_or_none()

            if user:
                logger.debug(f"Retrieved user by email: {email}")
            else:
                logger.debug(f"User with email {email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            User instance if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.is_active:
            logger.debug(f"Authentication failed: user {email} is inactive")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        logger.info(f"User authenticated successfully: {email}")
        return user

    async def update_password(self, user_id: uuid.UUID, new_password: str) -> Optional[User]:
        """
        Update user's password with proper hashing.

        Raises:
            ValueError: If password validation fails
        """
        hashed_password = User.hash_password(new_password)
        updated_user = await self.update(user_id, {"hashed_password": hashed_password})

        if updated_user:
            logger.info(f"Password updated for user: {updated_user.email}")

        return updated_user

    async def bump_session_version(self, user_id: uuid.UUID) -> Optional[User]:
        """
        Invalidate every token issued to the user so far.

        Returns:
            Updated user instance or None if the user no longer exists
        """
        user = await self.get_by_id(user_id)
        if user is None:
            return None

        return await self.update(user_id, {"session_version": user.session_version + 1})

    async def add_role(self, user: User, role: UserRole, commit: bool = True) -> User:
        if role not in user.roles:
            user.role_assignments.append(UserRoleAssignment(role=role))
            await self._finish(commit)
            await self.db.refresh(user)
            logger.info(f"Granted role {role.value} to {user.email}")
        return user

    async def remove_role(self, user: User, role: UserRole, commit: bool = True) -> User:
        for assignment in list(user.role_assignments):
            if assignment.role == role:
                user.role_assignments.remove(assignment)
        await self._finish(commit)
        await self.db.refresh(user)
        logger.info(f"Revoked role {role.value} from {user.email}")
        return user

    async def list_users(self, skip: int = 0, limit: Optional[int] = 100) -> List[User]:
        """Users ordered by email, the way the admin user list shows them."""
        return await self.get_multi(skip=skip, limit=limit, order_by="email")

    async def count_by_role(self) -> Dict[str, int]:
        """
        Count users holding each role.

        Returns:
            Mapping of role name to user count, including roles nobody holds
        """
        try:
            query = (
                select(UserRoleAssignment.role, func.count(UserRoleAssignment.user_id))
                .group_by(UserRoleAssignment.role)
            )
            result = await self.db.execute(query)
            counts = {role.value: 0 for role in UserRole}
            for role, count in result.all():
                counts[UserRole(role).value] = count
            return counts
        except Exception as e:
            logger.error(f"Failed to count users by role: {e}")
            raise

    async def role_assignment_ids(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        result = await self.db.execute(
            select(UserRoleAssignment.id).where(UserRoleAssignment.user_id == user_id)
        )
        return list(result.scalars().all())

    async def delete_role_assignments(self, user_id: uuid.UUID, commit: bool = True) -> int:
        """Remove every role row of a user. Used by the user cascade."""
        ids = await self.role_assignment_ids(user_id)
        return await BaseRepository(UserRoleAssignment, self.db).delete_many(ids, commit=commit)

    async def check_email_availability(self, email: str, exclude_user_id: Optional[uuid.UUID] = None) -> bool:
        """
        Check if email address is available for registration or update.

        Args:
            email: Email address to check
            exclude_user_id: Optional user ID to exclude from check (for updates)

        Returns:
            True if email is available, False if taken or malformed
        """
        try:
            normalized_email = User.validate_email_format(email)
        except ValueError as e:
            logger.error(f"Invalid email format: {e}")
            return False

        query = select(func.count(User.id)).where(User.email == normalized_email)
        if exclude_user_id:
            query = query.where(User.id != exclude_user_id)

        result = await self.db.execute(query)
        return (result.scalar() or 0) == 0
