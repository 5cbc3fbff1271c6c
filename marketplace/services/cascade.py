"""
Cascade-delete orchestration for users, properties and images.
Children are always removed before their parent, files before rows, inside one transaction.
"""

from typing import Iterable, List, Optional, Protocol
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.image import PropertyImage
from marketplace.repositories.image import ImageRepository
from marketplace.repositories.message import MessageRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.request import RequestRepository
from marketplace.repositories.user import UserRepository
from marketplace.services.authorization import Action, Actor, AuthorizationPolicy
from marketplace.services.identity import IdentityContext
from marketplace.utils.exceptions import (
    ImageNotFoundError,
    PropertyNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    async def save(self, content: bytes, suggested_name: str) -> str: ...

    def delete(self, url: str) -> bool: ...


class CascadeDeleteService:
    """
    Removes an entity together with everything that only exists in reference to it.

    File removal is best-effort: a failure is logged and the row deletion
    proceeds. Row deletions for one operation share a single transaction.
    """

    def __init__(
        self,
        db: AsyncSession,
        blob_store: BlobStore,
        policy: Optional[AuthorizationPolicy] = None
    ):
        self.db = db
        self.blob_store = blob_store
        self.policy = policy or AuthorizationPolicy()
        self.user_repo = UserRepository(db)
        self.property_repo = PropertyRepository(db)
        self.image_repo = ImageRepository(db)
        self.request_repo = RequestRepository(db)
        self.message_repo = MessageRepository(db)

    def _delete_file(self, url: str) -> None:
        try:
            self.blob_store.delete(url)
        except Exception as e:
            logger.warning(f"Could not remove file {url}, continuing: {e}")

    async def _purge_images(self, images: Iterable[PropertyImage]) -> int:
        images = list(images)
        for image in images:
            self._delete_file(image.url)
        return await self.image_repo.delete_many([image.id for image in images], commit=False)

    async def _purge_properties(self, property_ids: List[uuid.UUID]) -> None:
        """Delete requests and images of the given properties, then the properties. No commit."""
        request_ids = await self.request_repo.ids_touching(property_ids=property_ids)
        await self.request_repo.delete_many(request_ids, commit=False)

        images = await self.image_repo.get_by_property_ids(property_ids)
        await self._purge_images(images)

        await self.property_repo.delete_many(property_ids, commit=False)

    async def delete_user(self, user_id: uuid.UUID, identity: Optional[IdentityContext] = None) -> None:
        """
        Delete a user and every row that references them.

        Removes, in order: requests the user filed, the user's properties
        (with their requests and images, files included), messages the user
        sent or received, role assignments, then the user row. When the
        deletion is the user's own, pass their ``identity`` so the session
        is invalidated afterwards.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        try:
            filed_request_ids = await self.request_repo.ids_touching(user_id=user_id)
            await self.request_repo.delete_many(filed_request_ids, commit=False)

            property_ids = await self.property_repo.ids_by_owner(user_id)
            await self._purge_properties(property_ids)

            message_ids = await self.message_repo.ids_involving(user_id)
            await self.message_repo.delete_many(message_ids, commit=False)

            await self.user_repo.delete_role_assignments(user_id, commit=False)
            await self.user_repo.delete(user_id, commit=False)

            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete user {user_id}, rolled back: {e}")
            raise

        logger.info(
            f"Deleted user {user_id} with {len(property_ids)} properties, "
            f"{len(message_ids)} messages"
        )

        if identity is not None:
            await identity.invalidate_session()

    async def delete_property(self, property_id: uuid.UUID, actor: Actor) -> None:
        """
        Delete a property with its requests and images.

        Raises:
            PropertyNotFoundError: If the property does not exist
            InsufficientPermissionsError: If the actor may not delete it
        """
        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))

        self.policy.require(actor, Action.DELETE_PROPERTY, property_obj)

        try:
            await self._purge_properties([property_id])
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete property {property_id}, rolled back: {e}")
            raise

        logger.info(f"Property {property_id} deleted by {actor.id}")

    async def delete_image(self, image_id: uuid.UUID, property_id: uuid.UUID, actor: Actor) -> None:
        """
        Delete one image of a property: file first, then row.

        Raises:
            ImageNotFoundError: If the image does not exist or belongs to another property
            InsufficientPermissionsError: If the actor is neither owner nor Admin
        """
        image = await self.image_repo.get_by_id(image_id)
        if image is None or image.property_id != property_id:
            raise ImageNotFoundError(str(image_id))

        self.policy.require(actor, Action.DELETE_IMAGE, image.property_rel)

        try:
            await self._purge_images([image])
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete image {image_id}, rolled back: {e}")
            raise

        logger.info(f"Image {image_id} of property {property_id} deleted by {actor.id}")
