"""
Pydantic schemas for property requests (a user's expression of interest in a listing).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID
from marketplace.schemas.property import PropertyResponse
from marketplace.schemas.user import UserResponse


class RequestCreate(BaseModel):
    """Schema for filing a request against a property."""

    model_config = ConfigDict(str_strip_whitespace=True)

    property_id: UUID = Field(..., description="Property the request is about")
    notes: str = Field(
        ...,
        max_length=1000,
        description="Message to the owner, required",
        examples=["I would like to arrange a viewing next week."]
    )

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, v):
        if not v or not v.strip():
            raise ValueError("Notes cannot be empty")
        return v.strip()


class RequestStatusUpdate(BaseModel):
    """
    Schema for changing a request's status.

    Pending, Approved and Rejected are stored in canonical casing; any other
    non-empty text of at most 50 characters is accepted as is. Length limits
    apply after surrounding whitespace is stripped.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    status: str = Field(..., min_length=1, max_length=50, examples=["Approved"])


class RequestResponse(BaseModel):
    """Schema for request responses."""

    id: str
    property_id: str
    user_id: str = Field(..., description="Requesting user")
    notes: str
    status: str
    created_at: datetime
    updated_at: datetime
    property: Optional[PropertyResponse] = None
    user: Optional[UserResponse] = None
