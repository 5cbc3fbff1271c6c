"""
Messaging API endpoints for direct messages between users.
"""

from fastapi import APIRouter, Depends, status
from typing import List
from uuid import UUID

from marketplace.models.message import Message
from marketplace.services.authorization import Actor
from marketplace.services.message import MessageService
from marketplace.schemas.message import MessageCreate, MessageReply, ReplyDraft, MessageResponse
from marketplace.schemas.error import get_crud_error_responses, get_common_error_responses
from marketplace.utils.dependencies import get_actor, get_message_service


router = APIRouter(prefix="/messages", tags=["Messages"])


def to_response(message: Message) -> MessageResponse:
    return MessageResponse.model_validate(message.to_dict())


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send message",
    description="Send a message to another user identified by email or id",
    responses=get_crud_error_responses()
)
async def send_message(
    message_data: MessageCreate,
    actor: Actor = Depends(get_actor),
    message_service: MessageService = Depends(get_message_service)
) -> MessageResponse:
    if message_data.to_email is not None:
        message = await message_service.send_message_to_email(
            actor.id,
            message_data.to_email,
            message_data.subject,
            message_data.body
        )
    else:
        message = await message_service.send_message(
            actor.id,
            message_data.to_user_id,
            message_data.subject,
            message_data.body
        )
    return to_response(message)


@router.get(
    "",
    response_model=List[MessageResponse],
    summary="Inbox",
    description="Messages sent or received by the caller, newest first. Admins see every message.",
    responses=get_common_error_responses()
)
async def inbox(
    actor: Actor = Depends(get_actor),
    message_service: MessageService = Depends(get_message_service)
) -> List[MessageResponse]:
    return [to_response(m) for m in await message_service.get_inbox(actor)]


@router.get("/sent", response_model=List[MessageResponse], summary="Sent messages")
async def sent_messages(
    actor: Actor = Depends(get_actor),
    message_service: MessageService = Depends(get_message_service)
) -> List[MessageResponse]:
    return [to_response(m) for m in await message_service.get_sent(actor)]


@router.get("/received", response_model=List[MessageResponse], summary="Received messages")
async def received_messages(
    actor: Actor = Depends(get_actor),
    message_service: MessageService = Depends(get_message_service)
) -> List[MessageResponse]:
    return [to_response(m) for m in await message_service.get_received(actor)]


@router.get(
    "/{message_id}",
    response_model=MessageResponse,
    summary="Message details",
    responses=get_common_error_responses()
)
async def get_message(
    message_id: UUID,
    actor: Actor = Depends(get_actor),
    message_service: MessageService = Depends(get_message_service)
) -> MessageResponse:
    return to_response(await message_service.get_message(message_id, actor))


@router.get(
    "/{message_id}/reply",
    response_model=ReplyDraft,
    summary="Reply draft",
    description="Pre-filled reply addressed to the original sender. Recipient only.",
    responses=get_common_error_responses()
)
async def reply_draft(
    message_id: UUID,
    actor: Actor = Depends(get_actor),
    message_service: MessageService = Depends(get_message_service)
) -> ReplyDraft:
    return ReplyDraft.model_validate(await message_service.prepare_reply(message_id, actor))


@router.post(
    "/{message_id}/reply",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Reply to message",
    responses=get_crud_error_responses()
)
async def reply_to_message(
    message_id: UUID,
    reply_data: MessageReply,
    actor: Actor = Depends(get_actor),
    message_service: MessageService = Depends(get_message_service)
) -> MessageResponse:
    message = await message_service.reply(message_id, reply_data.body, actor, subject=reply_data.subject)
    return to_response(message)


@router.delete(
    "/{message_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete message",
    responses=get_crud_error_responses()
)
async def delete_message(
    message_id: UUID,
    actor: Actor = Depends(get_actor),
    message_service: MessageService = Depends(get_message_service)
) -> None:
    await message_service.delete_message(message_id, actor)
