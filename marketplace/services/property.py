"""
Property service for managing property listings.
Handles listing CRUD, featured and owner views, and delegates deletion to the cascade orchestrator.
"""

from typing import Optional, List, Dict, Any, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from marketplace.repositories.property import PropertyRepository
from marketplace.models.property import Property, PropertyStatus
from marketplace.services.authorization import Action, Actor, AuthorizationPolicy
from marketplace.services.cascade import BlobStore, CascadeDeleteService
from marketplace.services.image import ImageService
from marketplace.utils.exceptions import PropertyNotFoundError
from marketplace.utils.file_utils import ValidatedImage
from marketplace.utils.validators import ValidationUtils
import uuid
import logging

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6

EDITABLE_FIELDS = ("title", "description", "address", "price", "bedrooms", "bathrooms", "area", "status")


class PropertyService:
    """
    Property service for managing property listings.

    Edit and delete go through the authorization policy; whether they
    require ownership depends on the policy's configuration.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        blob_store: BlobStore,
        policy: Optional[AuthorizationPolicy] = None
    ):
        self.db = db_session
        self.blob_store = blob_store
        self.policy = policy or AuthorizationPolicy()
        self.property_repo = PropertyRepository(db_session)
        self.image_service = ImageService(db_session, blob_store, self.policy)

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        clean = {k: v for k, v in data.items() if k in EDITABLE_FIELDS and v is not None}
        if "status" in clean:
            clean["status"] = ValidationUtils.normalize_status(clean["status"], PropertyStatus)
        return clean

    async def create_property(
        self,
        property_data: Dict[str, Any],
        actor: Actor,
        images: Sequence[ValidatedImage] = ()
    ) -> Property:
        """
        Create a listing owned by the actor, optionally with images.

        The property row and its image rows are committed together.

        Args:
            property_data: Listing fields
            actor: Creating user, recorded as owner
            images: Validated uploads to attach

        Returns:
            Created property with images loaded
        """
        create_data = self._clean(property_data)
        create_data.setdefault("status", PropertyStatus.AVAILABLE.value)
        create_data["owner_id"] = actor.id

        property_obj = await self.property_repo.create_property(create_data, commit=False)
        await self.image_service.store_images(property_obj, images, commit=False)
        await self.db.commit()

        logger.info(f"Property created by user {actor.id}: {property_obj.title} (ID: {property_obj.id})")
        return await self.get_property(property_obj.id)

    async def get_property(self, property_id: uuid.UUID) -> Property:
        """
        Get property by ID. Listings are public.

        Raises:
            PropertyNotFoundError: If property doesn't exist
        """
        property_obj = await self.property_repo.get_by_id(property_id)
        if not property_obj:
            raise PropertyNotFoundError(str(property_id))
        return property_obj

    async def list_properties(self, skip: int = 0, limit: Optional[int] = 100) -> List[Property]:
        return await self.property_repo.list_newest(skip=skip, limit=limit)

    async def get_featured_properties(self, limit: int = FEATURED_LIMIT) -> List[Property]:
        """Newest available listings for the landing page."""
        return await self.property_repo.get_featured(limit=limit)

    async def get_user_properties(self, actor: Actor) -> List[Property]:
        return await self.property_repo.get_by_owner(actor.id)

    async def update_property(
        self,
        property_id: uuid.UUID,
        property_data: Dict[str, Any],
        actor: Actor,
        images: Sequence[ValidatedImage] = ()
    ) -> Property:
        """
        Update listing fields and optionally attach more images.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            InsufficientPermissionsError: If the policy denies the edit
        """
        property_obj = await self.get_property(property_id)
        self.policy.require(actor, Action.EDIT_PROPERTY, property_obj)

        await self.property_repo.update(property_id, self._clean(property_data), commit=False)
        await self.image_service.store_images(property_obj, images, commit=False)
        await self.db.commit()

        logger.info(f"Property {property_id} updated by {actor.id}")
        return await self.get_property(property_id)

    async def delete_property(self, property_id: uuid.UUID, actor: Actor) -> None:
        """Delete a listing with its requests and images."""
        await CascadeDeleteService(self.db, self.blob_store, self.policy).delete_property(property_id, actor)
