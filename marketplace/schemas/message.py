"""
Pydantic schemas for direct messages between users.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from typing import Optional
from datetime import datetime
from uuid import UUID


class MessageCreate(BaseModel):
    """Schema for sending a message. The recipient is given by email or by id."""

    model_config = ConfigDict(str_strip_whitespace=True)

    to_email: Optional[EmailStr] = Field(None, description="Recipient email", examples=["agent@realestate.com"])
    to_user_id: Optional[UUID] = Field(None, description="Recipient id")
    subject: str = Field(..., max_length=200, examples=["Question about your listing"])
    body: str = Field(..., max_length=2000, examples=["Is the apartment still available?"])

    @model_validator(mode='after')
    def validate_recipient(self):
        """Exactly one way of naming the recipient must be used."""
        if (self.to_email is None) == (self.to_user_id is None):
            raise ValueError("Provide either to_email or to_user_id")
        return self


class MessageReply(BaseModel):
    """Schema for replying to a received message."""

    model_config = ConfigDict(str_strip_whitespace=True)

    subject: Optional[str] = Field(None, max_length=200, description="Defaults to 'Re: ' + original subject")
    body: str = Field(..., max_length=2000)


class ReplyDraft(BaseModel):
    """Pre-filled reply form."""

    to_email: str
    subject: str
    body: str = ""


class MessageResponse(BaseModel):
    """Schema for message responses."""

    id: str
    from_user_id: str
    to_user_id: str
    from_email: Optional[str] = None
    to_email: Optional[str] = None
    subject: str
    body: str
    sent_at: datetime
