"""
Repository for PropertyImage model operations.
Handles database queries and operations for property images.
"""

import uuid
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.image import PropertyImage
from marketplace.repositories.base import BaseRepository


class ImageRepository(BaseRepository[PropertyImage]):
    """Repository for PropertyImage database operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyImage, db)

    async def get_by_property_id(self, property_id: uuid.UUID) -> List[PropertyImage]:
        """
        Get all images for a specific property.

        Args:
            property_id: ID of the property

        Returns:
            List of property images in upload order
        """
        query = (
            select(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .order_by(PropertyImage.created_at.asc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_property_ids(self, property_ids: List[uuid.UUID]) -> List[PropertyImage]:
        if not property_ids:
            return []

        query = select(PropertyImage).where(PropertyImage.property_id.in_(property_ids))
        result = await self.db.execute(query)
        return list(result.scalars().all())
