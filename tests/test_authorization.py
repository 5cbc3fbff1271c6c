"""
Unit tests for the authorization policy and status normalisation.
Targets are plain model instances; nothing touches the database.
"""

import dataclasses
import uuid

import pytest

from marketplace.models.message import Message
from marketplace.models.property import Property, PropertyStatus
from marketplace.models.request import PropertyRequest, RequestStatus
from marketplace.models.user import UserRole
from marketplace.services.authorization import Action, Actor, AuthorizationPolicy, Decision
from marketplace.services.request import normalize_status
from marketplace.utils.exceptions import InsufficientPermissionsError, ValidationError
from marketplace.utils.validators import ValidationUtils


OWNER = Actor.of(uuid.uuid4(), [UserRole.AGENT])
REQUESTER = Actor.of(uuid.uuid4(), [UserRole.CLIENT])
STRANGER = Actor.of(uuid.uuid4(), [UserRole.CLIENT])
AGENT = Actor.of(uuid.uuid4(), [UserRole.AGENT])
ADMIN = Actor.of(uuid.uuid4(), [UserRole.ADMIN])


def make_property(owner_id=None) -> Property:
    return Property(id=uuid.uuid4(), title="Flat", owner_id=owner_id)


def make_request(owner_id=OWNER.id, requester_id=REQUESTER.id) -> PropertyRequest:
    property_obj = make_property(owner_id)
    request = PropertyRequest(id=uuid.uuid4(), property_id=property_obj.id, user_id=requester_id, notes="hi")
    request.property_rel = property_obj
    return request


def make_message(sender=REQUESTER, recipient=OWNER) -> Message:
    return Message(id=uuid.uuid4(), from_user_id=sender.id, to_user_id=recipient.id, subject="s", body="b")


class TestActor:
    def test_roles_are_coerced_to_enum(self):
        actor = Actor.of(uuid.uuid4(), ["Admin", "Agent"])
        assert actor.roles == frozenset({UserRole.ADMIN, UserRole.AGENT})
        assert actor.is_admin

    def test_actor_is_immutable_value(self):
        user_id = uuid.uuid4()
        assert Actor.of(user_id, ["Client"]) == Actor.of(user_id, [UserRole.CLIENT])
        with pytest.raises(dataclasses.FrozenInstanceError):
            OWNER.id = uuid.uuid4()


class TestPropertyRules:
    @pytest.mark.parametrize("actor", [None, OWNER, STRANGER, ADMIN])
    def test_anyone_may_view(self, policy, actor):
        assert policy.can_perform(actor, Action.VIEW_PROPERTY, make_property(OWNER.id))

    @pytest.mark.parametrize("action", [Action.EDIT_PROPERTY, Action.DELETE_PROPERTY])
    def test_loose_rule_admits_any_authenticated_actor(self, policy, action):
        target = make_property(OWNER.id)
        assert policy.can_perform(OWNER, action, target)
        assert policy.can_perform(ADMIN, action, target)
        assert policy.can_perform(STRANGER, action, target)
        assert not policy.can_perform(None, action, target)

    @pytest.mark.parametrize("action", [Action.EDIT_PROPERTY, Action.DELETE_PROPERTY])
    def test_strict_rule_requires_owner_or_admin(self, strict_policy, action):
        target = make_property(OWNER.id)
        assert strict_policy.can_perform(OWNER, action, target)
        assert strict_policy.can_perform(ADMIN, action, target)
        assert not strict_policy.can_perform(STRANGER, action, target)

    def test_strict_rule_on_ownerless_property(self, strict_policy):
        target = make_property(None)
        assert not strict_policy.can_perform(STRANGER, Action.EDIT_PROPERTY, target)
        assert strict_policy.can_perform(ADMIN, Action.EDIT_PROPERTY, target)

    def test_image_delete_requires_owner_or_admin_even_when_loose(self, policy):
        target = make_property(OWNER.id)
        assert policy.can_perform(OWNER, Action.DELETE_IMAGE, target)
        assert policy.can_perform(ADMIN, Action.DELETE_IMAGE, target)
        assert not policy.can_perform(STRANGER, Action.DELETE_IMAGE, target)


class TestRequestRules:
    def test_view(self, policy):
        request = make_request()
        assert policy.can_perform(REQUESTER, Action.VIEW_REQUEST, request)
        assert policy.can_perform(OWNER, Action.VIEW_REQUEST, request)
        assert policy.can_perform(ADMIN, Action.VIEW_REQUEST, request)
        assert not policy.can_perform(STRANGER, Action.VIEW_REQUEST, request)

    @pytest.mark.parametrize(
        "actor,allowed",
        [(OWNER, True), (ADMIN, True), (REQUESTER, False), (STRANGER, False), (AGENT, False)]
    )
    def test_update_status_iff_owner_or_admin(self, policy, actor, allowed):
        assert policy.can_perform(actor, Action.UPDATE_REQUEST_STATUS, make_request()) is allowed

    def test_update_status_on_ownerless_property_is_admin_only(self, policy):
        request = make_request(owner_id=None)
        assert not policy.can_perform(REQUESTER, Action.UPDATE_REQUEST_STATUS, request)
        assert policy.can_perform(ADMIN, Action.UPDATE_REQUEST_STATUS, request)

    def test_delete_is_requester_or_admin(self, policy):
        request = make_request()
        assert policy.can_perform(REQUESTER, Action.DELETE_REQUEST, request)
        assert policy.can_perform(ADMIN, Action.DELETE_REQUEST, request)
        assert not policy.can_perform(OWNER, Action.DELETE_REQUEST, request)
        assert not policy.can_perform(STRANGER, Action.DELETE_REQUEST, request)


class TestMessageRules:
    @pytest.mark.parametrize("action", [Action.VIEW_MESSAGE, Action.DELETE_MESSAGE])
    @pytest.mark.parametrize(
        "actor,allowed",
        [(REQUESTER, True), (OWNER, True), (ADMIN, True), (STRANGER, False), (AGENT, False)]
    )
    def test_visible_to_endpoints_and_admin(self, policy, action, actor, allowed):
        assert policy.can_perform(actor, action, make_message()) is allowed

    def test_only_recipient_may_reply(self, policy):
        message = make_message(sender=REQUESTER, recipient=OWNER)
        assert policy.can_perform(OWNER, Action.REPLY_MESSAGE, message)
        assert not policy.can_perform(REQUESTER, Action.REPLY_MESSAGE, message)
        assert not policy.can_perform(ADMIN, Action.REPLY_MESSAGE, message)


class TestAdminArea:
    def test_admin_only_by_default(self, policy):
        assert policy.can_perform(ADMIN, Action.ADMIN_AREA)
        assert not policy.can_perform(AGENT, Action.ADMIN_AREA)
        assert not policy.can_perform(REQUESTER, Action.ADMIN_AREA)
        assert not policy.can_perform(None, Action.ADMIN_AREA)

    def test_agents_admitted_when_configured(self):
        policy = AuthorizationPolicy(admin_area_roles=[UserRole.ADMIN, UserRole.AGENT])
        assert policy.can_perform(AGENT, Action.ADMIN_AREA)
        assert policy.can_perform(ADMIN, Action.ADMIN_AREA)
        assert not policy.can_perform(REQUESTER, Action.ADMIN_AREA)


class TestDecisions:
    def test_authorize_returns_decision(self, policy):
        message = make_message()
        assert policy.authorize(REQUESTER, Action.VIEW_MESSAGE, message) is Decision.ALLOWED
        assert policy.authorize(STRANGER, Action.VIEW_MESSAGE, message) is Decision.FORBIDDEN

    def test_require_raises_forbidden(self, policy):
        with pytest.raises(InsufficientPermissionsError) as exc_info:
            policy.require(STRANGER, Action.UPDATE_REQUEST_STATUS, make_request())
        assert exc_info.value.status_code == 403
        assert exc_info.value.action == "update request status"


class TestStatusNormalisation:
    @pytest.mark.parametrize("raw,expected", [
        ("approved", "Approved"),
        ("  REJECTED ", "Rejected"),
        ("Pending", "Pending"),
        (RequestStatus.APPROVED, "Approved"),
        ("On hold", "On hold"),
    ])
    def test_request_status(self, raw, expected):
        assert normalize_status(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "x" * 51])
    def test_rejects_empty_or_long_status(self, raw):
        with pytest.raises(ValidationError):
            normalize_status(raw)

    def test_property_status_keeps_free_text(self):
        assert ValidationUtils.normalize_status("sold", PropertyStatus) == "Sold"
        assert ValidationUtils.normalize_status("Under offer", PropertyStatus) == "Under offer"
