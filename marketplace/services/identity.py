"""
Identity context for the active request.
Wraps the authenticated user and lets services invalidate its session.
"""

from typing import FrozenSet, Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.user import User, UserRole
from marketplace.repositories.user import UserRepository
from marketplace.services.authorization import Actor

logger = logging.getLogger(__name__)


class IdentityContext:
    """
    Identity of the caller, resolved from the bearer token.

    Sessions are token based: invalidating one bumps the user's
    ``session_version`` so every token issued before is rejected.
    """

    def __init__(self, db: AsyncSession, user: Optional[User]):
        self.db = db
        self.user = user
        self._user_id = user.id if user is not None else None
        self._roles = frozenset(user.roles) if user is not None else frozenset()

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def current_user_id(self) -> Optional[uuid.UUID]:
        return self._user_id

    def current_user_roles(self) -> FrozenSet[UserRole]:
        return self._roles

    def actor(self) -> Optional[Actor]:
        """Explicit actor value handed to authorization-sensitive services."""
        if self._user_id is None:
            return None
        return Actor(id=self._user_id, roles=self._roles)

    async def invalidate_session(self) -> None:
        """
        Revoke every token of the current user and forget the identity.

        Safe to call after the user row has been deleted.
        """
        if self._user_id is None:
            return

        await UserRepository(self.db).bump_session_version(self._user_id)
        logger.info(f"Invalidated session for user {self._user_id}")

        self.user = None
        self._user_id = None
        self._roles = frozenset()
