"""
Property repository for managing marketplace listings.
Provides listing queries used by the public pages, the owner pages and the admin area.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from marketplace.repositories.base import BaseRepository
from marketplace.models.property import Property, PropertyStatus
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    """Repository for property listings."""

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any], commit: bool = True) -> Property:
        """
        Create a new property listing.

        Args:
            property_data: Dictionary containing property information
            commit: Commit immediately, or only flush

        Returns:
            Created property instance
        """
        created_property = await self.create(property_data, commit=commit)
        logger.info(f"Created property: {created_property.title} (ID: {created_property.id})")
        return created_property

    async def list_newest(self, skip: int = 0, limit: Optional[int] = 100) -> List[Property]:
        return await self.get_multi(skip=skip, limit=limit, order_by="-created_at")

    async def get_featured(self, limit: int = 6) -> List[Property]:
        """
        Get the newest available properties for the landing page.

        Args:
            limit: Maximum number of properties to return

        Returns:
            Available properties, newest first
        """
        try:
            query = (
                select(Property)
                .where(Property.status == PropertyStatus.AVAILABLE.value)
                .order_by(desc(Property.created_at))
                .limit(limit)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get featured properties: {e}")
            raise

    async def get_by_owner(self, owner_id: uuid.UUID) -> List[Property]:
        return await self.get_multi(limit=None, filters={"owner_id": owner_id}, order_by="-created_at")

    async def ids_by_owner(self, owner_id: uuid.UUID) -> List[uuid.UUID]:
        """IDs of every property the user owns."""
        result = await self.db.execute(select(Property.id).where(Property.owner_id == owner_id))
        return list(result.scalars().all())

    async def count_by_status(self) -> Dict[str, int]:
        """
        Count properties per status value.

        Returns:
            Mapping of status text to count
        """
        try:
            query = select(Property.status, func.count(Property.id)).group_by(Property.status)
            result = await self.db.execute(query)
            return {status: count for status, count in result.all()}
        except Exception as e:
            logger.error(f"Failed to count properties by status: {e}")
            raise
