"""
PropertyRequest model: one user's inquiry on one property.
The status column is free text; RequestStatus names the values the UI uses.
"""

from sqlalchemy import String, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from marketplace.database import Base
import enum
import uuid
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from marketplace.models.property import Property
    from marketplace.models.user import User


class RequestStatus(str, enum.Enum):
    """Known request statuses. Pending is the only initial state."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PropertyRequest(Base):
    """
    Inquiry filed by a user against a property.

    property_id, user_id and created_at never change after creation;
    status is the only mutable field.
    """

    __tablename__ = "requests"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the requesting user"
    )

    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=RequestStatus.PENDING.value,
        index=True
    )

    property_rel: Mapped["Property"] = relationship("Property", lazy="selectin")

    user: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        return f"<PropertyRequest(id={self.id}, property_id={self.property_id}, status={self.status})>"

    @property
    def property_owner_id(self) -> Optional[uuid.UUID]:
        """Owner of the requested property, the second party allowed to act on it."""
        return self.property_rel.owner_id if self.property_rel is not None else None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING.value

    def to_dict(self, include_property: bool = False, include_user: bool = False) -> dict:
        result = {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "user_id": str(self.user_id),
            "notes": self.notes,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_property:
            result["property"] = self.property_rel.to_dict() if self.property_rel else None

        if include_user:
            result["user"] = self.user.to_dict() if self.user else None

        return result


requests_owner_lookup_index = Index(
    'idx_requests_property_created',
    PropertyRequest.property_id,
    PropertyRequest.created_at.desc()
)
