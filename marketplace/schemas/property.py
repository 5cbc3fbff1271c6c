"""
Pydantic schemas for property requests and responses.
Handles listing creation and updates, including the multipart form variant used with image uploads.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from marketplace.schemas.image import PropertyImageResponse
from marketplace.schemas.user import UserResponse
from marketplace.utils.exceptions import ValidationError


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Property listing title",
        examples=["Beautiful 3BR Apartment in Downtown"]
    )

    description: Optional[str] = Field(
        None,
        max_length=5000,
        description="Detailed property description",
        examples=["Spacious apartment with modern amenities."]
    )

    address: Optional[str] = Field(
        None,
        max_length=500,
        description="Street address",
        examples=["12 Harbour Road, Dubai"]
    )

    price: Decimal = Field(
        Decimal("0"),
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Property price in local currency",
        examples=[250000.00]
    )

    bedrooms: int = Field(0, ge=0, le=50, description="Number of bedrooms", examples=[3])

    bathrooms: int = Field(0, ge=0, le=50, description="Number of bathrooms", examples=[2])

    area: int = Field(0, ge=0, le=1000000, description="Property area in square feet", examples=[1200])

    status: Optional[str] = Field(
        None,
        max_length=50,
        description="Listing status; Available and Sold are well known, any other text is kept",
        examples=["Available"]
    )

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Validate and clean title."""
        if not v or not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

    @field_validator('description', 'address')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if v is not None else v

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Status cannot be empty")
        return v


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""


class PropertyUpdate(BaseModel):
    """Schema for updating an existing property. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    address: Optional[str] = Field(None, max_length=500)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    area: Optional[int] = Field(None, ge=0, le=1000000)
    status: Optional[str] = Field(None, max_length=50)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip() if v is not None else v

    @field_validator('status')
    @classmethod
    def validate_status(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Status cannot be empty")
        return v


class PropertyResponse(BaseModel):
    """Schema for property responses."""

    id: str = Field(..., description="Property unique identifier")
    title: str
    description: Optional[str] = None
    address: Optional[str] = None
    price: float = Field(..., description="Property price")
    bedrooms: int
    bathrooms: int
    area: int
    status: str = Field(..., description="Listing status")
    owner_id: Optional[str] = Field(None, description="ID of the listing owner, if any")
    owner: Optional[UserResponse] = Field(None, description="Listing owner")
    images: List[PropertyImageResponse] = Field(default_factory=list, description="Property images")
    image_count: int = Field(0, description="Number of images")
    created_at: datetime
    updated_at: datetime


def parse_property_form(schema, **fields):
    """
    Validate multipart form fields against a property schema.

    Form submissions bypass FastAPI's body validation, so failures are
    re-raised as the API's own ``ValidationError`` with per-field details.
    """
    try:
        return schema(**{k: v for k, v in fields.items() if v is not None})
    except PydanticValidationError as e:
        field_errors = [
            {
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in e.errors()
        ]
        raise ValidationError("Property data is invalid", field_errors=field_errors)
