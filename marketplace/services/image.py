"""
Image service for property image uploads.
Stores validated uploads through the blob store and records one row per file.
"""

from typing import List, Optional, Sequence
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import get_settings
from marketplace.models.image import PropertyImage
from marketplace.models.property import Property
from marketplace.repositories.image import ImageRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.services.authorization import Action, Actor, AuthorizationPolicy
from marketplace.services.cascade import BlobStore, CascadeDeleteService
from marketplace.utils.exceptions import PropertyNotFoundError, ResourceLimitExceededError
from marketplace.utils.file_utils import ValidatedImage

logger = logging.getLogger(__name__)
settings = get_settings()


class ImageService:
    """Service for managing property image uploads and storage."""

    def __init__(
        self,
        db_session: AsyncSession,
        blob_store: BlobStore,
        policy: Optional[AuthorizationPolicy] = None
    ):
        self.db = db_session
        self.blob_store = blob_store
        self.policy = policy or AuthorizationPolicy()
        self.repository = ImageRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def store_images(
        self,
        property_obj: Property,
        uploads: Sequence[ValidatedImage],
        commit: bool = True
    ) -> List[PropertyImage]:
        """
        Save files and create their rows.

        If anything fails, files written so far are removed again and the
        error propagates.

        Args:
            property_obj: Property the images belong to
            uploads: Already validated uploads
            commit: Commit immediately, or leave it to the caller

        Returns:
            Created image rows

        Raises:
            ResourceLimitExceededError: If more files than allowed are sent at once
        """
        if len(uploads) > settings.max_images_per_upload:
            raise ResourceLimitExceededError("Images per upload", settings.max_images_per_upload)

        saved_urls: List[str] = []
        images: List[PropertyImage] = []
        try:
            for upload in uploads:
                url = await self.blob_store.save(upload.content, upload.filename)
                saved_urls.append(url)
                image = await self.repository.create({
                    "property_id": property_obj.id,
                    "url": url,
                    "filename": upload.filename,
                    "file_size": upload.size,
                    "mime_type": upload.mime_type,
                }, commit=False)
                images.append(image)

            if commit:
                await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            for url in saved_urls:
                self.blob_store.delete(url)
            logger.error(f"Failed to store images for property {property_obj.id}: {e}")
            raise

        if images:
            logger.info(f"Stored {len(images)} images for property {property_obj.id}")
        return images

    async def upload_images(
        self,
        property_id: uuid.UUID,
        uploads: Sequence[ValidatedImage],
        actor: Actor
    ) -> List[PropertyImage]:
        """
        Add images to an existing property. Authorized like editing the property.

        Raises:
            PropertyNotFoundError: If the property does not exist
            InsufficientPermissionsError: If the actor may not edit the property
        """
        property_obj = await self.property_repo.get_by_id(property_id)
        if property_obj is None:
            raise PropertyNotFoundError(str(property_id))

        self.policy.require(actor, Action.EDIT_PROPERTY, property_obj)
        return await self.store_images(property_obj, uploads)

    async def get_property_images(self, property_id: uuid.UUID) -> List[PropertyImage]:
        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(str(property_id))
        return await self.repository.get_by_property_id(property_id)

    async def delete_image(self, image_id: uuid.UUID, property_id: uuid.UUID, actor: Actor) -> None:
        """Remove one image, file first. See CascadeDeleteService.delete_image."""
        await CascadeDeleteService(self.db, self.blob_store, self.policy).delete_image(
            image_id, property_id, actor
        )
