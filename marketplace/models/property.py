"""
Property model for marketplace listings.
Handles property data, pricing, free-form status and ownership.
"""

from sqlalchemy import String, Text, Integer, Numeric, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from marketplace.database import Base
from decimal import Decimal
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from marketplace.models.user import User
    from marketplace.models.image import PropertyImage


class PropertyStatus(str, enum.Enum):
    """
    Well-known listing states.

    The column itself is a plain string so listings may carry any other
    status text (e.g. "Rented", "Under offer").
    """
    AVAILABLE = "Available"
    SOLD = "Sold"


class Property(Base):
    """
    Property model for managing listings.
    Owned by at most one user; owns its images.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True
    )

    address: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        default=Decimal("0"),
        comment="Property price in local currency"
    )

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    area: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Property area in square feet"
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=PropertyStatus.AVAILABLE.value,
        index=True,
        comment="Free-form listing status"
    )

    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="ID of the user who listed this property"
    )

    owner: Mapped[Optional["User"]] = relationship(
        "User",
        lazy="selectin"
    )

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        lazy="selectin",
        passive_deletes=True,
        order_by="PropertyImage.created_at.asc()"
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}..., price={self.price})>"

    @property
    def image_count(self) -> int:
        return len(self.images)

    def is_owned_by(self, user_id: Optional[uuid.UUID]) -> bool:
        return self.owner_id is not None and self.owner_id == user_id

    def to_dict(self, include_owner: bool = False, include_images: bool = False) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_owner: Whether to include owner information
            include_images: Whether to include image information

        Returns:
            Dictionary representation of property
        """
        result = {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "address": self.address,
            "price": float(self.price),
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area": self.area,
            "status": self.status,
            "owner_id": str(self.owner_id) if self.owner_id else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_owner:
            result["owner"] = self.owner.to_dict() if self.owner else None

        if include_images:
            result["images"] = [image.to_dict() for image in self.images]
            result["image_count"] = self.image_count

        return result


# Composite index for the owner's listing page
owner_status_index = Index(
    'idx_properties_owner_status',
    Property.owner_id,
    Property.status
)
