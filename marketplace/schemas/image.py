"""
Pydantic schemas for property image responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class PropertyImageResponse(BaseModel):
    """Schema for property image responses."""

    id: str = Field(..., description="Image unique identifier")
    property_id: str = Field(..., description="ID of the property this image belongs to")
    url: str = Field(
        ...,
        description="Public URL of the stored image",
        examples=["/uploads/properties/1b4e28ba-2fa1-11d2-883f-0016d3cca427_front.jpg"]
    )
    filename: Optional[str] = Field(None, description="Original filename")
    file_size: Optional[int] = Field(None, description="File size in bytes")
    mime_type: Optional[str] = Field(None, description="MIME type", examples=["image/jpeg"])
    created_at: datetime = Field(..., description="Upload timestamp")


class ImageUploadResponse(BaseModel):
    """Schema for image upload responses."""

    success: bool = Field(..., description="Whether the upload was successful")
    message: str = Field(..., description="Upload result message")
    images: List[PropertyImageResponse] = Field(default_factory=list, description="Stored images")
