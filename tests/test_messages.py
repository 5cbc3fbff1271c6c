"""
Tests for the messaging service.
"""

import uuid

import pytest

from marketplace.services.message import MessageService
from marketplace.utils.exceptions import (
    InsufficientPermissionsError,
    MessageNotFoundError,
    NotFoundError,
    UserNotFoundError,
    ValidationError,
)
from tests.conftest import MessageFactory, UserFactory, actor_for


@pytest.fixture
def message_service(db_session) -> MessageService:
    return MessageService(db_session)


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_send(self, message_service, test_client_user, test_agent):
        message = await message_service.send_message(test_client_user.id, test_agent.id, " Viewing ", "Tomorrow?")

        assert message.from_user_id == test_client_user.id
        assert message.to_user_id == test_agent.id
        assert message.subject == "Viewing"
        assert message.body == "Tomorrow?"
        assert message.sent_at is not None

    @pytest.mark.asyncio
    async def test_cannot_message_yourself(self, message_service, test_client_user):
        with pytest.raises(ValidationError):
            await message_service.send_message(test_client_user.id, test_client_user.id, "Hi", "me")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("subject,body", [("", "body"), ("subject", "  "), ("x" * 201, "body"), ("s", "x" * 2001)])
    async def test_invalid_text(self, message_service, test_client_user, test_agent, subject, body):
        with pytest.raises(ValidationError):
            await message_service.send_message(test_client_user.id, test_agent.id, subject, body)

    @pytest.mark.asyncio
    async def test_unknown_recipient(self, message_service, test_client_user):
        with pytest.raises(UserNotFoundError):
            await message_service.send_message(test_client_user.id, uuid.uuid4(), "Hi", "there")

    @pytest.mark.asyncio
    async def test_send_by_email(self, message_service, test_client_user, test_agent):
        message = await message_service.send_message_to_email(test_client_user.id, "AGENT@example.com", "Hi", "there")
        assert message.to_user_id == test_agent.id

    @pytest.mark.asyncio
    async def test_send_by_unknown_email(self, message_service, test_client_user):
        with pytest.raises(NotFoundError):
            await message_service.send_message_to_email(test_client_user.id, "nobody@example.com", "Hi", "there")


class TestMailboxes:
    @pytest.mark.asyncio
    async def test_views(self, message_service, message_repository, user_repository, test_client_user, test_agent, test_admin):
        third = await UserFactory.create_user(user_repository)
        sent = await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id)
        received = await MessageFactory.create_message(message_repository, test_agent.id, test_client_user.id)
        unrelated = await MessageFactory.create_message(message_repository, test_agent.id, third.id)

        client = actor_for(test_client_user)
        assert [m.id for m in await message_service.get_inbox(client)] == [received.id, sent.id]
        assert [m.id for m in await message_service.get_sent(client)] == [sent.id]
        assert [m.id for m in await message_service.get_received(client)] == [received.id]

        everything = await message_service.get_inbox(actor_for(test_admin))
        assert {m.id for m in everything} == {sent.id, received.id, unrelated.id}

    @pytest.mark.asyncio
    async def test_view_single_message(self, message_service, message_repository, user_repository, test_client_user, test_agent, test_admin):
        message = await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id)

        for user in (test_client_user, test_agent, test_admin):
            assert (await message_service.get_message(message.id, actor_for(user))).id == message.id

        stranger = await UserFactory.create_user(user_repository)
        with pytest.raises(InsufficientPermissionsError):
            await message_service.get_message(message.id, actor_for(stranger))

        with pytest.raises(MessageNotFoundError):
            await message_service.get_message(uuid.uuid4(), actor_for(test_admin))


class TestReply:
    @pytest.mark.asyncio
    async def test_reply_draft(self, message_service, message_repository, test_client_user, test_agent):
        message = await MessageFactory.create_message(
            message_repository, test_client_user.id, test_agent.id, subject="Flat on Main St"
        )

        draft = await message_service.prepare_reply(message.id, actor_for(test_agent))

        assert draft == {"to_email": "client@example.com", "subject": "Re: Flat on Main St", "body": ""}

    @pytest.mark.asyncio
    async def test_reply_goes_back_to_sender(self, message_service, message_repository, test_client_user, test_agent):
        message = await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id, subject="Hello")

        reply = await message_service.reply(message.id, "Sure", actor_for(test_agent))

        assert reply.from_user_id == test_agent.id
        assert reply.to_user_id == test_client_user.id
        assert reply.subject == "Re: Hello"
        assert reply.body == "Sure"

    @pytest.mark.asyncio
    async def test_reply_with_own_subject(self, message_service, message_repository, test_client_user, test_agent):
        message = await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id)
        reply = await message_service.reply(message.id, "Sure", actor_for(test_agent), subject="Viewing slot")
        assert reply.subject == "Viewing slot"

    @pytest.mark.asyncio
    async def test_only_recipient_replies(self, message_service, message_repository, test_client_user, test_agent, test_admin):
        message = await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id)

        for user in (test_client_user, test_admin):
            with pytest.raises(InsufficientPermissionsError):
                await message_service.prepare_reply(message.id, actor_for(user))
            with pytest.raises(InsufficientPermissionsError):
                await message_service.reply(message.id, "no", actor_for(user))

    @pytest.mark.asyncio
    async def test_long_subject_is_truncated(self, message_service, message_repository, test_client_user, test_agent):
        message = await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id, subject="x" * 200)
        reply = await message_service.reply(message.id, "ok", actor_for(test_agent))
        assert len(reply.subject) == 200
        assert reply.subject.startswith("Re: ")


class TestDeleteMessage:
    @pytest.mark.asyncio
    async def test_either_endpoint_or_admin(self, message_service, message_repository, test_client_user, test_agent, test_admin):
        for user in (test_client_user, test_agent, test_admin):
            message = await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id)
            await message_service.delete_message(message.id, actor_for(user))
            assert await message_repository.get_by_id(message.id) is None

    @pytest.mark.asyncio
    async def test_stranger_cannot_delete(self, message_service, message_repository, user_repository, test_client_user, test_agent):
        message = await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id)
        stranger = await UserFactory.create_user(user_repository)

        with pytest.raises(InsufficientPermissionsError):
            await message_service.delete_message(message.id, actor_for(stranger))
        assert await message_repository.exists(message.id)
