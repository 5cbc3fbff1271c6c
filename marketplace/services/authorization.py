"""
Authorization policy for properties, images, requests, messages and the admin area.
Decisions are pure functions of the actor and the target entity; nothing is read from ambient state.
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Optional
import enum
import logging
import uuid

from marketplace.models.user import User, UserRole
from marketplace.utils.exceptions import InsufficientPermissionsError

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    """Actions subject to authorization."""
    VIEW_PROPERTY = "view_property"
    EDIT_PROPERTY = "edit_property"
    DELETE_PROPERTY = "delete_property"
    DELETE_IMAGE = "delete_image"
    VIEW_REQUEST = "view_request"
    UPDATE_REQUEST_STATUS = "update_request_status"
    DELETE_REQUEST = "delete_request"
    VIEW_MESSAGE = "view_message"
    DELETE_MESSAGE = "delete_message"
    REPLY_MESSAGE = "reply_message"
    ADMIN_AREA = "admin_area"

    @property
    def description(self) -> str:
        return self.value.replace("_", " ")


class Decision(str, enum.Enum):
    ALLOWED = "Allowed"
    FORBIDDEN = "Forbidden"


@dataclass(frozen=True)
class Actor:
    """The identity (id and roles) an operation is attempted on behalf of."""

    id: uuid.UUID
    roles: FrozenSet[UserRole] = field(default_factory=frozenset)

    @classmethod
    def of(cls, user_id: uuid.UUID, roles: Iterable[Any] = ()) -> "Actor":
        return cls(id=user_id, roles=frozenset(UserRole(role) for role in roles))

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, roles=frozenset(user.roles))

    @property
    def is_admin(self) -> bool:
        return UserRole.ADMIN in self.roles

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        return not self.roles.isdisjoint(roles)


class AuthorizationPolicy:
    """
    Decides whether an actor may perform an action on a target.

    Args:
        property_ownership_required: When False (the historical behaviour), any
            authenticated actor may edit or delete any property. When True, only
            the owner or an Admin may.
        admin_area_roles: Roles admitted to the admin area.
    """

    def __init__(
        self,
        property_ownership_required: bool = False,
        admin_area_roles: Iterable[UserRole] = (UserRole.ADMIN,)
    ):
        self.property_ownership_required = property_ownership_required
        self.admin_area_roles = frozenset(admin_area_roles)

    def can_perform(self, actor: Optional[Actor], action: Action, target: Any = None) -> bool:
        """
        Evaluate the rule for ``action``.

        Args:
            actor: Acting identity, None for anonymous callers
            action: Action being attempted
            target: Property, PropertyImage, PropertyRequest or Message, as the action requires

        Returns:
            True if the action is allowed
        """
        if action is Action.VIEW_PROPERTY:
            return True

        if actor is None:
            return False

        if action in (Action.EDIT_PROPERTY, Action.DELETE_PROPERTY):
            if target.is_owned_by(actor.id) or actor.is_admin:
                return True
            return not self.property_ownership_required

        if action is Action.DELETE_IMAGE:
            # target is the image's property
            return target.is_owned_by(actor.id) or actor.is_admin

        if action is Action.VIEW_REQUEST:
            return (
                actor.id == target.user_id
                or actor.id == target.property_owner_id
                or actor.is_admin
            )

        if action is Action.UPDATE_REQUEST_STATUS:
            return actor.id == target.property_owner_id or actor.is_admin

        if action is Action.DELETE_REQUEST:
            return actor.id == target.user_id or actor.is_admin

        if action in (Action.VIEW_MESSAGE, Action.DELETE_MESSAGE):
            return target.involves(actor.id) or actor.is_admin

        if action is Action.REPLY_MESSAGE:
            return actor.id == target.to_user_id

        if action is Action.ADMIN_AREA:
            return actor.has_any_role(self.admin_area_roles)

        return False

    def authorize(self, actor: Optional[Actor], action: Action, target: Any = None) -> Decision:
        return Decision.ALLOWED if self.can_perform(actor, action, target) else Decision.FORBIDDEN

    def require(self, actor: Optional[Actor], action: Action, target: Any = None) -> None:
        """
        Raise unless the action is allowed.

        Raises:
            InsufficientPermissionsError: If the decision is Forbidden
        """
        if not self.can_perform(actor, action, target):
            logger.info(
                f"Denied {action.value} for actor {actor.id if actor else 'anonymous'} "
                f"on {getattr(target, 'id', None)}"
            )
            raise InsufficientPermissionsError(action.description)
