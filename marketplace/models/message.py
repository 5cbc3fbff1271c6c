"""
Message model for direct user-to-user communication.
Messages are immutable once sent; they can only be deleted.
"""

from sqlalchemy import String, Text, DateTime, ForeignKey, Index, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from marketplace.database import Base, utcnow
from datetime import datetime
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from marketplace.models.user import User


class Message(Base):
    """Directed message between two distinct users."""

    __tablename__ = "messages"

    from_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    to_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    subject: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True
    )

    from_user: Mapped["User"] = relationship("User", foreign_keys=[from_user_id], lazy="selectin")

    to_user: Mapped["User"] = relationship("User", foreign_keys=[to_user_id], lazy="selectin")

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, from={self.from_user_id}, to={self.to_user_id})>"

    def involves(self, user_id: uuid.UUID) -> bool:
        """Whether the user is one of the two endpoints."""
        return user_id in (self.from_user_id, self.to_user_id)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "from_user_id": str(self.from_user_id),
            "to_user_id": str(self.to_user_id),
            "from_email": self.from_user.email if self.from_user else None,
            "to_email": self.to_user.email if self.to_user else None,
            "subject": self.subject,
            "body": self.body,
            "sent_at": self.sent_at.isoformat(),
        }


conversation_index = Index(
    'idx_messages_conversation',
    Message.from_user_id,
    Message.to_user_id,
    Message.sent_at
)
