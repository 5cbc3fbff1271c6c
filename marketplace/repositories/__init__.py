"""
Repository layer for data access operations.
Provides database operations with proper error handling and logging.
"""

from marketplace.repositories.base import BaseRepository
from marketplace.repositories.image import ImageRepository
from marketplace.repositories.message import MessageRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.request import RequestRepository
from marketplace.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ImageRepository",
    "MessageRepository",
    "PropertyRepository",
    "RequestRepository",
    "UserRepository",
]
