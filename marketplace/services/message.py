"""
Messaging service for direct messages between users.
Handles sending, mailbox views, replies and deletion with endpoint-based access control.
"""

from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.message import Message
from marketplace.repositories.message import MessageRepository
from marketplace.repositories.user import UserRepository
from marketplace.services.authorization import Action, Actor, AuthorizationPolicy
from marketplace.utils.exceptions import (
    MessageNotFoundError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from marketplace.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)

MAX_SUBJECT_LENGTH = 200
MAX_BODY_LENGTH = 2000
REPLY_PREFIX = "Re: "


class MessageService:
    """Service for user-to-user messages. Messages are never edited, only deleted."""

    def __init__(self, db: AsyncSession, policy: Optional[AuthorizationPolicy] = None):
        self.db = db
        self.policy = policy or AuthorizationPolicy()
        self.message_repo = MessageRepository(db)
        self.user_repo = UserRepository(db)

    async def _load(self, message_id: uuid.UUID) -> Message:
        message = await self.message_repo.get_by_id(message_id)
        if message is None:
            raise MessageNotFoundError(str(message_id))
        return message

    async def send_message(
        self,
        from_user_id: uuid.UUID,
        to_user_id: uuid.UUID,
        subject: str,
        body: str
    ) -> Message:
        """
        Send a message.

        Args:
            from_user_id: Sender
            to_user_id: Recipient, must differ from the sender
            subject: Required, at most 200 characters
            body: Required, at most 2000 characters

        Returns:
            Stored message

        Raises:
            ValidationError: If sender and recipient are the same or the text is invalid
            UserNotFoundError: If either endpoint does not exist
        """
        if from_user_id == to_user_id:
            raise ValidationError("Cannot send a message to yourself")

        subject = ValidationUtils.validate_string(subject, "Subject", max_length=MAX_SUBJECT_LENGTH)
        body = ValidationUtils.validate_string(body, "Body", max_length=MAX_BODY_LENGTH)

        for user_id in (from_user_id, to_user_id):
            if not await self.user_repo.exists(user_id):
                raise UserNotFoundError(str(user_id))

        message = await self.message_repo.create({
            "from_user_id": from_user_id,
            "to_user_id": to_user_id,
            "subject": subject,
            "body": body,
        })
        logger.info(f"Message {message.id} sent from {from_user_id} to {to_user_id}")
        return message

    async def send_message_to_email(self, from_user_id: uuid.UUID, to_email: str, subject: str, body: str) -> Message:
        """
        Send a message to the user registered under ``to_email``.

        Raises:
            NotFoundError: If no user has that email
        """
        recipient = await self.user_repo.get_by_email(to_email)
        if recipient is None:
            raise NotFoundError("Recipient", to_email)
        return await self.send_message(from_user_id, recipient.id, subject, body)

    async def get_message(self, message_id: uuid.UUID, actor: Actor) -> Message:
        message = await self._load(message_id)
        self.policy.require(actor, Action.VIEW_MESSAGE, message)
        return message

    async def get_inbox(self, actor: Actor) -> List[Message]:
        """Messages sent or received by the actor; an Admin sees every message."""
        if actor.is_admin:
            return await self.message_repo.list_all(limit=None)
        return await self.message_repo.get_inbox(actor.id)

    async def get_sent(self, actor: Actor) -> List[Message]:
        return await self.message_repo.get_sent(actor.id)

    async def get_received(self, actor: Actor) -> List[Message]:
        return await self.message_repo.get_received(actor.id)

    async def prepare_reply(self, message_id: uuid.UUID, actor: Actor) -> Dict[str, Any]:
        """
        Pre-filled reply draft. Only the recipient may reply.

        Returns:
            Dict with ``to_email``, ``subject`` and an empty ``body``
        """
        message = await self._load(message_id)
        self.policy.require(actor, Action.REPLY_MESSAGE, message)
        return {
            "to_email": message.from_user.email,
            "subject": (REPLY_PREFIX + message.subject)[:MAX_SUBJECT_LENGTH],
            "body": "",
        }

    async def reply(self, message_id: uuid.UUID, body: str, actor: Actor, subject: Optional[str] = None) -> Message:
        """
        Reply to a received message, addressed to its sender.

        Raises:
            MessageNotFoundError: If the original message does not exist
            InsufficientPermissionsError: If the actor is not the recipient
        """
        message = await self._load(message_id)
        self.policy.require(actor, Action.REPLY_MESSAGE, message)

        reply_subject = subject if subject and subject.strip() else REPLY_PREFIX + message.subject
        return await self.send_message(
            actor.id,
            message.from_user_id,
            reply_subject[:MAX_SUBJECT_LENGTH],
            body,
        )

    async def delete_message(self, message_id: uuid.UUID, actor: Actor) -> None:
        """
        Delete a message. Allowed for either endpoint or an Admin.

        Raises:
            MessageNotFoundError: If the message does not exist
            InsufficientPermissionsError: If the actor may not delete it
        """
        message = await self._load(message_id)
        self.policy.require(actor, Action.DELETE_MESSAGE, message)

        if not await self.message_repo.delete(message.id):
            raise MessageNotFoundError(str(message_id))
        logger.info(f"Message {message_id} deleted by {actor.id}")
