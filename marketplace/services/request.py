"""
Request lifecycle service.
Creates property inquiries, drives their status and enforces who may see or remove them.
"""

from typing import List, Optional, Union
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.request import PropertyRequest, RequestStatus
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.request import RequestRepository
from marketplace.repositories.user import UserRepository
from marketplace.services.authorization import Action, Actor, AuthorizationPolicy
from marketplace.utils.exceptions import (
    PropertyNotFoundError,
    RequestNotFoundError,
    UserNotFoundError,
)
from marketplace.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 1000


def normalize_status(status: Union[str, RequestStatus]) -> str:
    """Map a requested status onto RequestStatus casing, keeping any other text."""
    return ValidationUtils.normalize_status(status, RequestStatus)


class RequestService:
    """Service for property requests and their status lifecycle."""

    def __init__(self, db: AsyncSession, policy: Optional[AuthorizationPolicy] = None):
        self.db = db
        self.policy = policy or AuthorizationPolicy()
        self.request_repo = RequestRepository(db)
        self.property_repo = PropertyRepository(db)
        self.user_repo = UserRepository(db)

    async def _load(self, request_id: uuid.UUID) -> PropertyRequest:
        request = await self.request_repo.get_by_id(request_id)
        if request is None:
            raise RequestNotFoundError(str(request_id))
        return request

    async def create_request(self, property_id: uuid.UUID, user_id: uuid.UUID, notes: str) -> PropertyRequest:
        """
        File a new request. Status always starts as Pending.

        Args:
            property_id: Property being inquired about
            user_id: Requesting user
            notes: Free-text message to the owner

        Returns:
            Created request

        Raises:
            PropertyNotFoundError: If the property does not exist
            UserNotFoundError: If the requester does not exist
            ValidationError: If notes are empty or too long
        """
        notes = ValidationUtils.validate_string(notes, "Notes", max_length=MAX_NOTES_LENGTH)

        if not await self.property_repo.exists(property_id):
            raise PropertyNotFoundError(str(property_id))
        if not await self.user_repo.exists(user_id):
            raise UserNotFoundError(str(user_id))

        request = await self.request_repo.create({
            "property_id": property_id,
            "user_id": user_id,
            "notes": notes,
            "status": RequestStatus.PENDING.value,
        })
        logger.info(f"User {user_id} filed request {request.id} on property {property_id}")
        return request

    async def get_request(self, request_id: uuid.UUID, actor: Actor) -> PropertyRequest:
        """
        Load a request the actor may view.

        Raises:
            RequestNotFoundError: If the request does not exist
            InsufficientPermissionsError: If the actor may not view it
        """
        request = await self._load(request_id)
        self.policy.require(actor, Action.VIEW_REQUEST, request)
        return request

    async def update_request_status(
        self,
        request_id: uuid.UUID,
        new_status: Union[str, RequestStatus],
        actor: Actor
    ) -> PropertyRequest:
        """
        Overwrite a request's status.

        Only the property owner or an Admin may do this. No transition table
        is enforced and no history is kept; concurrent updates are last-write-wins.

        Raises:
            RequestNotFoundError: If the request does not exist
            InsufficientPermissionsError: If the actor is neither owner nor Admin
            ValidationError: If the status text is empty or too long
        """
        request = await self._load(request_id)
        self.policy.require(actor, Action.UPDATE_REQUEST_STATUS, request)

        status = normalize_status(new_status)
        updated = await self.request_repo.update(request.id, {"status": status})
        logger.info(f"Request {request_id} status set to {status} by {actor.id}")
        return updated

    async def delete_request(self, request_id: uuid.UUID, actor: Actor) -> None:
        """
        Delete a request. Allowed for the requester or an Admin.

        Raises:
            RequestNotFoundError: If the request does not exist
            InsufficientPermissionsError: If the actor may not delete it
        """
        request = await self._load(request_id)
        self.policy.require(actor, Action.DELETE_REQUEST, request)

        if not await self.request_repo.delete(request.id):
            raise RequestNotFoundError(str(request_id))
        logger.info(f"Request {request_id} deleted by {actor.id}")

    async def list_requests(self, actor: Actor) -> List[PropertyRequest]:
        """Requests the actor filed; an Admin sees every request."""
        if actor.is_admin:
            return await self.request_repo.list_all(limit=None)
        return await self.request_repo.get_by_user(actor.id)

    async def list_property_requests(self, actor: Actor) -> List[PropertyRequest]:
        """Requests filed against properties the actor owns."""
        return await self.request_repo.get_for_owner(actor.id)
