"""
FastAPI dependency injection utilities for authentication, services and the blob store.
Provides reusable dependencies for route protection and actor extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from marketplace.config import get_settings
from marketplace.database import get_db
from marketplace.models.user import User, UserRole
from marketplace.services.admin import AdminService
from marketplace.services.auth import AuthService
from marketplace.services.authorization import Action, Actor, AuthorizationPolicy
from marketplace.services.identity import IdentityContext
from marketplace.services.image import ImageService
from marketplace.services.message import MessageService
from marketplace.services.property import PropertyService
from marketplace.services.request import RequestService
from marketplace.services.storage import LocalBlobStore
from marketplace.utils.exceptions import UnauthorizedError


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_blob_store() -> LocalBlobStore:
    """Blob store rooted at the configured upload directory."""
    settings = get_settings()
    return LocalBlobStore(settings.upload_dir, settings.uploads_url_prefix)


def get_policy() -> AuthorizationPolicy:
    """
    Authorization policy built from settings.

    ``property_ownership_required`` and ``admin_area_allow_agents`` select
    between the behaviours the marketplace has historically shipped with.
    """
    settings = get_settings()
    admin_roles = [UserRole.ADMIN]
    if settings.admin_area_allow_agents:
        admin_roles.append(UserRole.AGENT)
    return AuthorizationPolicy(
        property_ownership_required=settings.property_ownership_required,
        admin_area_roles=admin_roles,
    )


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
    policy: AuthorizationPolicy = Depends(get_policy)
) -> PropertyService:
    return PropertyService(db, blob_store, policy)


async def get_image_service(
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
    policy: AuthorizationPolicy = Depends(get_policy)
) -> ImageService:
    return ImageService(db, blob_store, policy)


async def get_request_service(
    db: AsyncSession = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_policy)
) -> RequestService:
    return RequestService(db, policy)


async def get_message_service(
    db: AsyncSession = Depends(get_db),
    policy: AuthorizationPolicy = Depends(get_policy)
) -> MessageService:
    return MessageService(db, policy)


async def get_admin_service(
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store)
) -> AdminService:
    return AdminService(db, blob_store)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_identity(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> IdentityContext:
    return IdentityContext(db, current_user)


async def get_actor(identity: IdentityContext = Depends(get_identity)) -> Actor:
    """Explicit actor value for the authenticated caller."""
    return identity.actor()


async def require_admin_area(
    actor: Actor = Depends(get_actor),
    policy: AuthorizationPolicy = Depends(get_policy)
) -> Actor:
    """
    Gate for admin-area routes.

    Raises:
        InsufficientPermissionsError: If the actor's roles are not admitted
    """
    policy.require(actor, Action.ADMIN_AREA)
    return actor
