"""
PropertyImage model for managing property image uploads.
Each image row points at one stored file, addressed by its public URL.
"""

from sqlalchemy import String, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from marketplace.database import Base
import uuid
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from marketplace.models.property import Property


class PropertyImage(Base):
    """
    PropertyImage model for uploaded property images.
    An image never outlives its property.
    """

    __tablename__ = "property_images"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the property this image belongs to"
    )

    url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        unique=True,
        comment="Public URL of the stored image file"
    )

    filename: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Original filename of the uploaded image"
    )

    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="images",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        """String representation of the property image."""
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, url={self.url})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "property_id": str(self.property_id),
            "url": self.url,
            "filename": self.filename,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "created_at": self.created_at.isoformat(),
        }
