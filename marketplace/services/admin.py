"""
Admin area service: dashboard counters, user moderation and aggregate statistics.
Callers are expected to have passed the admin-area authorization check.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.property import PropertyStatus
from marketplace.models.request import RequestStatus
from marketplace.models.user import User, UserRole
from marketplace.repositories.message import MessageRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.request import RequestRepository
from marketplace.repositories.user import UserRepository
from marketplace.services.cascade import BlobStore, CascadeDeleteService
from marketplace.utils.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5
TREND_MONTHS = 6
TOP_REQUESTED_LIMIT = 5


def month_starts(now: datetime, months: int) -> List[datetime]:
    """
    First instant of each of the last ``months`` calendar months, oldest first.

    The current month is included.
    """
    year, month = now.year, now.month
    starts = []
    for _ in range(months):
        starts.append(datetime(year, month, 1, tzinfo=timezone.utc))
        month -= 1
        if month == 0:
            month, year = 12, year - 1
    return list(reversed(starts))


def monthly_counts(timestamps: Iterable[datetime], starts: List[datetime]) -> List[Dict[str, Any]]:
    """
    Bucket timestamps by calendar month.

    Naive timestamps (as SQLite returns them) are taken to be UTC.

    Returns:
        One ``{"month": "YYYY-MM", "count": n}`` entry per month start
    """
    counts = {(start.year, start.month): 0 for start in starts}
    for ts in timestamps:
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        ts = ts.astimezone(timezone.utc)
        key = (ts.year, ts.month)
        if key in counts:
            counts[key] += 1
    return [
        {"month": f"{year:04d}-{month:02d}", "count": count}
        for (year, month), count in counts.items()
    ]


class AdminService:
    """Service backing the admin dashboard and user moderation."""

    def __init__(self, db: AsyncSession, blob_store: BlobStore):
        self.db = db
        self.blob_store = blob_store
        self.user_repo = UserRepository(db)
        self.property_repo = PropertyRepository(db)
        self.request_repo = RequestRepository(db)
        self.message_repo = MessageRepository(db)

    async def get_dashboard(self) -> Dict[str, Any]:
        """
        Headline counters plus the most recent properties and requests.

        Returns:
            Dictionary of totals and recent entities
        """
        recent_properties = await self.property_repo.list_newest(limit=RECENT_LIMIT)
        recent_requests = await self.request_repo.list_all(limit=RECENT_LIMIT)

        return {
            "total_users": await self.user_repo.count(),
            "total_properties": await self.property_repo.count(),
            "total_requests": await self.request_repo.count(),
            "total_messages": await self.message_repo.count(),
            "pending_requests": await self.request_repo.count({"status": RequestStatus.PENDING.value}),
            "available_properties": await self.property_repo.count({"status": PropertyStatus.AVAILABLE.value}),
            "sold_properties": await self.property_repo.count({"status": PropertyStatus.SOLD.value}),
            "recent_properties": [p.to_dict() for p in recent_properties],
            "recent_requests": [r.to_dict(include_property=True) for r in recent_requests],
        }

    async def list_users(self) -> List[User]:
        return await self.user_repo.list_users(limit=None)

    async def get_user_details(self, user_id: uuid.UUID) -> Dict[str, Any]:
        """
        A user with their roles, owned properties and filed requests.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        properties = await self.property_repo.get_by_owner(user_id)
        requests = await self.request_repo.get_by_user(user_id)
        return {
            "user": user.to_dict(),
            "properties": [p.to_dict() for p in properties],
            "requests": [r.to_dict() for r in requests],
        }

    async def toggle_user_role(self, user_id: uuid.UUID, role: UserRole) -> User:
        """
        Grant ``role`` if the user lacks it, revoke it otherwise.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        role = UserRole(role)
        if role in user.roles:
            return await self.user_repo.remove_role(user, role)
        return await self.user_repo.add_role(user, role)

    async def delete_user(self, user_id: uuid.UUID) -> None:
        """Delete a user with everything that references them."""
        await CascadeDeleteService(self.db, self.blob_store).delete_user(user_id)

    async def list_properties(self):
        return await self.property_repo.list_newest(limit=None)

    async def list_requests(self):
        return await self.request_repo.list_all(limit=None)

    async def list_messages(self):
        return await self.message_repo.list_all(limit=None)

    async def get_statistics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Aggregates for the statistics page.

        Args:
            now: Reference time for the monthly trends, defaults to the current UTC time

        Returns:
            Dictionary with per-status counts, users per role, monthly
            request and message trends and the most requested properties
        """
        now = now or datetime.now(timezone.utc)
        starts = month_starts(now, TREND_MONTHS)
        since = starts[0]

        request_times = await self.request_repo.created_since(since)
        message_times = await self.message_repo.sent_since(since)

        statistics = {
            "properties_by_status": await self.property_repo.count_by_status(),
            "requests_by_status": await self.request_repo.count_by_status(),
            "users_by_role": await self.user_repo.count_by_role(),
            "monthly_requests": monthly_counts(request_times, starts),
            "monthly_messages": monthly_counts(message_times, starts),
            "top_requested_properties": await self.request_repo.most_requested_properties(TOP_REQUESTED_LIMIT),
        }
        logger.debug("Generated admin statistics")
        return statistics
