"""
API route handlers for the real estate marketplace.
Provides organized routing for different API endpoints.
"""

from .auth import router as auth_router
from .properties import router as properties_router
from .images import router as images_router
from .requests import router as requests_router
from .messages import router as messages_router
from .admin import router as admin_router

__all__ = [
    "auth_router",
    "properties_router",
    "images_router",
    "requests_router",
    "messages_router",
    "admin_router",
]
