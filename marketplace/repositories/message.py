"""
Repository for direct messages between users.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc, or_
from marketplace.repositories.base import BaseRepository
from marketplace.models.message import Message
from typing import Optional, List
from datetime import datetime
import uuid


class MessageRepository(BaseRepository[Message]):
    """Repository for Message database operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(Message, db)

    async def list_all(self, skip: int = 0, limit: Optional[int] = 100) -> List[Message]:
        return await self.get_multi(skip=skip, limit=limit, order_by="-sent_at")

    async def get_inbox(self, user_id: uuid.UUID) -> List[Message]:
        """Messages the user sent or received, newest first."""
        query = (
            select(Message)
            .where(or_(Message.from_user_id == user_id, Message.to_user_id == user_id))
            .order_by(desc(Message.sent_at))
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_sent(self, user_id: uuid.UUID) -> List[Message]:
        return await self.get_multi(limit=None, filters={"from_user_id": user_id}, order_by="-sent_at")

    async def get_received(self, user_id: uuid.UUID) -> List[Message]:
        return await self.get_multi(limit=None, filters={"to_user_id": user_id}, order_by="-sent_at")

    async def ids_involving(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        """IDs of messages the user sent or received."""
        result = await self.db.execute(
            select(Message.id).where(or_(Message.from_user_id == user_id, Message.to_user_id == user_id))
        )
        return list(result.scalars().all())

    async def sent_since(self, since: datetime) -> List[datetime]:
        result = await self.db.execute(select(Message.sent_at).where(Message.sent_at >= since))
        return list(result.scalars().all())
