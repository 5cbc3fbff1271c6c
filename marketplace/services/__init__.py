"""
Service layer for business logic implementation.
Contains the authorization policy, request lifecycle, cascade deletes and the per-resource services.
"""

from .authorization import Action, Actor, AuthorizationPolicy, Decision
from .auth import AuthService
from .cascade import CascadeDeleteService
from .identity import IdentityContext
from .image import ImageService
from .message import MessageService
from .property import PropertyService
from .request import RequestService
from .admin import AdminService
from .storage import LocalBlobStore
from .error_handler import ErrorHandlerService

__all__ = [
    "Action",
    "Actor",
    "AuthorizationPolicy",
    "Decision",
    "AuthService",
    "CascadeDeleteService",
    "IdentityContext",
    "ImageService",
    "MessageService",
    "PropertyService",
    "RequestService",
    "AdminService",
    "LocalBlobStore",
    "ErrorHandlerService"
]
