"""
Database models for the marketplace.
Includes User, Property, PropertyImage, PropertyRequest and Message models.
"""

from marketplace.models.user import User, UserRole, UserRoleAssignment
from marketplace.models.property import Property, PropertyStatus
from marketplace.models.image import PropertyImage
from marketplace.models.request import PropertyRequest, RequestStatus
from marketplace.models.message import Message

__all__ = [
    "User",
    "UserRole",
    "UserRoleAssignment",
    "Property",
    "PropertyStatus",
    "PropertyImage",
    "PropertyRequest",
    "RequestStatus",
    "Message",
]
