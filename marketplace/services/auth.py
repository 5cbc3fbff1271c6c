"""
Authentication service for registration, login, token management and account upkeep.
Handles JWT token generation and validation, session invalidation and self-service account deletion.
"""

from typing import Optional, Tuple, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from marketplace.repositories.user import UserRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.request import RequestRepository
from marketplace.models.user import User, UserRole
from marketplace.services.cascade import BlobStore, CascadeDeleteService
from marketplace.services.identity import IdentityContext
from marketplace.utils.auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
)
from marketplace.utils.exceptions import (
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    UserNotFoundError,
    ValidationError,
)
from jose import ExpiredSignatureError, JWTError
import uuid
import logging

logger = logging.getLogger(__name__)

SELF_REGISTRATION_ROLES = (UserRole.CLIENT, UserRole.AGENT)


class AuthService:
    """
    Authentication service for managing accounts and tokens.
    Sessions are stateless JWTs bound to the user's session_version.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: UserRole = UserRole.CLIENT
    ) -> User:
        """
        Register a new account.

        Args:
            email: Email address, stored lower-cased
            password: Plain text password
            first_name: Optional first name
            last_name: Optional last name
            role: Initial role, Client or Agent

        Returns:
            Created user

        Raises:
            ValidationError: If the role is not open to self-registration or input is invalid
            DuplicateResourceError: If the email is already registered
        """
        role = UserRole(role)
        if role not in SELF_REGISTRATION_ROLES:
            raise ValidationError(f"Cannot self-register with role {role.value}")

        if not await self.user_repo.check_email_availability(email):
            if await self.user_repo.get_by_email(email):
                raise DuplicateResourceError("User", email.lower().strip())
            raise ValidationError(f"Invalid email address: {email}")

        try:
            user = await self.user_repo.create_user(
                {
                    "email": email,
                    "password": password,
                    "first_name": first_name,
                    "last_name": last_name,
                },
                roles=[role],
            )
        except ValueError as e:
            raise ValidationError(str(e))

        logger.info(f"Registered {role.value} account: {user.email}")
        return user

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid
            InactiveUserError: If user account is inactive
        """
        if not email or not email.strip() or not password:
            raise InvalidCredentialsError()

        existing = await self.user_repo.get_by_email(email)
        if existing is not None and not existing.is_active:
            raise InactiveUserError()

        user = await self.user_repo.authenticate_user(email, password)
        if not user:
            logger.warning(f"Failed authentication attempt for email: {email}")
            raise InvalidCredentialsError()

        return user

    def create_tokens(self, user: User) -> Tuple[str, str]:
        """
        Create access and refresh tokens for user.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        access_token = create_access_token(
            user_id=user.id,
            email=user.email,
            roles=user.roles,
            session_version=user.session_version
        )

        refresh_token = create_refresh_token(
            user_id=user.id,
            email=user.email,
            session_version=user.session_version
        )

        return access_token, refresh_token

    async def login(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate user and create tokens.

        Returns:
            Tuple of (user, access_token, refresh_token)
        """
        user = await self.authenticate_user(email, password)
        access_token, refresh_token = self.create_tokens(user)
        return user, access_token, refresh_token

    async def _user_from_token(self, token: str, token_type: str) -> User:
        try:
            payload = verify_token(token, token_type=token_type)
            user_id = payload.user_uuid
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(str(e))

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise InvalidTokenError("User no longer exists")

        if payload.session_version != user.session_version:
            raise InvalidTokenError("Session has been signed out")

        if not user.is_active:
            raise InactiveUserError()

        return user

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Create new access token from refresh token.

        Raises:
            InvalidTokenError: If refresh token is invalid or its session was invalidated
            TokenExpiredError: If refresh token is expired
            InactiveUserError: If user account is inactive
        """
        user = await self._user_from_token(refresh_token, "refresh")
        return create_access_token(
            user_id=user.id,
            email=user.email,
            roles=user.roles,
            session_version=user.session_version
        )

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Raises:
            InvalidTokenError: If token is invalid or its session was invalidated
            TokenExpiredError: If token is expired
            InactiveUserError: If user account is inactive
        """
        return await self._user_from_token(token, "access")

    async def logout(self, identity: IdentityContext) -> None:
        """Sign the caller out everywhere."""
        await identity.invalidate_session()

    async def get_account_summary(self, user: User) -> Dict[str, Any]:
        """
        Account page data: the user, their listings and the requests they filed.
        """
        properties = await PropertyRepository(self.db).get_by_owner(user.id)
        requests = await RequestRepository(self.db).get_by_user(user.id)
        return {
            "user": user.to_dict(),
            "properties": [p.to_dict() for p in properties],
            "requests": [r.to_dict() for r in requests],
        }

    async def update_profile(
        self,
        user_id: uuid.UUID,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> User:
        """
        Update the caller's name fields. None leaves a field unchanged.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        updated = await self.user_repo.update(user_id, {
            "first_name": first_name.strip() if first_name is not None else None,
            "last_name": last_name.strip() if last_name is not None else None,
        })
        if updated is None:
            raise UserNotFoundError(str(user_id))
        logger.info(f"Profile updated for user {user_id}")
        return updated

    async def change_password(self, user: User, current_password: str, new_password: str) -> User:
        """
        Change the caller's password.

        Raises:
            InvalidCredentialsError: If the current password is incorrect
            ValidationError: If the new password is too weak
        """
        if not user.verify_password(current_password):
            raise InvalidCredentialsError("Current password is incorrect")

        try:
            updated = await self.user_repo.update_password(user.id, new_password)
        except ValueError as e:
            raise ValidationError(str(e))

        if updated is None:
            raise UserNotFoundError(str(user.id))
        return updated

    async def delete_account(self, identity: IdentityContext, blob_store: BlobStore) -> None:
        """
        Delete the caller's account with everything it owns, then sign out.

        Raises:
            UserNotFoundError: If the account no longer exists
        """
        user_id = identity.current_user_id()
        if user_id is None:
            raise InvalidTokenError("No signed-in user")

        await CascadeDeleteService(self.db, blob_store).delete_user(user_id, identity=identity)
        logger.info(f"User {user_id} deleted their account")
