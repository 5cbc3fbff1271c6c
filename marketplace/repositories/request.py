"""
Repository for property requests (inquiries).
Handles the lookups the request pages, the cascade delete and the admin statistics need.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc, or_
from marketplace.repositories.base import BaseRepository
from marketplace.models.request import PropertyRequest
from marketplace.models.property import Property
from typing import Optional, List, Dict, Any
from datetime import datetime
import uuid
import logging

logger = logging.getLogger(__name__)


class RequestRepository(BaseRepository[PropertyRequest]):
    """Repository for PropertyRequest database operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyRequest, db)

    async def list_all(self, skip: int = 0, limit: Optional[int] = 100) -> List[PropertyRequest]:
        return await self.get_multi(skip=skip, limit=limit, order_by="-created_at")

    async def get_by_user(self, user_id: uuid.UUID) -> List[PropertyRequest]:
        """Requests filed by the user, newest first."""
        return await self.get_multi(limit=None, filters={"user_id": user_id}, order_by="-created_at")

    async def get_for_owner(self, owner_id: uuid.UUID) -> List[PropertyRequest]:
        """
        Requests filed against properties the user owns.

        Args:
            owner_id: ID of the property owner

        Returns:
            Requests on the owner's properties, newest first
        """
        try:
            query = (
                select(PropertyRequest)
                .join(Property, PropertyRequest.property_id == Property.id)
                .where(Property.owner_id == owner_id)
                .order_by(desc(PropertyRequest.created_at))
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get requests for owner {owner_id}: {e}")
            raise

    async def ids_touching(
        self,
        user_id: Optional[uuid.UUID] = None,
        property_ids: Optional[List[uuid.UUID]] = None
    ) -> List[uuid.UUID]:
        """
        IDs of requests filed by a user or targeting any of the given properties.

        Args:
            user_id: Requester to match
            property_ids: Properties to match

        Returns:
            Matching request IDs
        """
        conditions = []
        if user_id is not None:
            conditions.append(PropertyRequest.user_id == user_id)
        if property_ids:
            conditions.append(PropertyRequest.property_id.in_(property_ids))
        if not conditions:
            return []

        result = await self.db.execute(select(PropertyRequest.id).where(or_(*conditions)))
        return list(result.scalars().all())

    async def count_by_status(self) -> Dict[str, int]:
        query = select(PropertyRequest.status, func.count(PropertyRequest.id)).group_by(PropertyRequest.status)
        result = await self.db.execute(query)
        return {status: count for status, count in result.all()}

    async def created_since(self, since: datetime) -> List[datetime]:
        """Creation timestamps of requests filed on or after ``since``."""
        result = await self.db.execute(
            select(PropertyRequest.created_at).where(PropertyRequest.created_at >= since)
        )
        return list(result.scalars().all())

    async def most_requested_properties(self, limit: int = 5) -> List[Dict[str, Any]]:
        """
        Properties with the most requests.

        Args:
            limit: Number of properties to return

        Returns:
            List of dicts with property id, title and request count
        """
        try:
            request_count = func.count(PropertyRequest.id).label("request_count")
            query = (
                select(Property.id, Property.title, request_count)
                .join(PropertyRequest, PropertyRequest.property_id == Property.id)
                .group_by(Property.id, Property.title)
                .order_by(desc(request_count))
                .limit(limit)
            )
            result = await self.db.execute(query)
            return [
                {"property_id": str(row.id), "title": row.title, "request_count": row.request_count}
                for row in result.all()
            ]
        except Exception as e:
            logger.error(f"Failed to get most requested properties: {e}")
            raise
