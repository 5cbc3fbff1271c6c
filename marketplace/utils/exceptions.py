"""
Custom exception classes for the marketplace API.
Each class fixes an HTTP status and an error code; the global handlers render
instances as the standard error envelope.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """
    Base API exception.

    Subclasses set ``default_status`` and ``error_code`` as class attributes.
    """

    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "API_ERROR"

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code or self.default_status, detail=detail, headers=headers)


class ValidationError(APIException):
    """Malformed input. ``field_errors`` lists per-field problems when known."""

    default_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail)
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """An id (or other key) that resolves to nothing."""

    default_status = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"
        super().__init__(detail)
        self.resource = resource
        self.resource_id = resource_id


class UnauthorizedError(APIException):
    default_status = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(APIException):
    """The caller is known but may not do this."""

    default_status = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(detail)


class ConflictError(APIException):
    default_status = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


class BadRequestError(APIException):
    default_status = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"


# Authentication
class InvalidCredentialsError(UnauthorizedError):
    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    """Malformed token, wrong token type, deleted user or signed-out session."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class InactiveUserError(ForbiddenError):
    def __init__(self, detail: str = "User account is inactive"):
        super().__init__(detail)


class InsufficientPermissionsError(ForbiddenError):
    """Raised by the authorization policy; ``action`` is the denied action in words."""

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")
        self.action = action


# Entities
class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class PropertyNotFoundError(NotFoundError):
    def __init__(self, property_id: str):
        super().__init__("Property", property_id)


class ImageNotFoundError(NotFoundError):
    """Also raised when the image exists but belongs to another property."""

    def __init__(self, image_id: str):
        super().__init__("Image", image_id)


class RequestNotFoundError(NotFoundError):
    def __init__(self, request_id: str):
        super().__init__("Request", request_id)


class MessageNotFoundError(NotFoundError):
    def __init__(self, message_id: str):
        super().__init__("Message", message_id)


class DuplicateResourceError(ConflictError):
    """Only registration raises this, for an email that is already taken."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")


# Uploads
class ResourceLimitExceededError(BadRequestError):
    def __init__(self, resource: str, limit: int):
        super().__init__(f"{resource} limit exceeded (maximum: {limit})")


class UnsupportedFileTypeError(BadRequestError):
    def __init__(self, file_type: str, supported_types: List[str]):
        supported = ", ".join(supported_types)
        super().__init__(f"Unsupported file type '{file_type}'. Supported types: {supported}")


class FileSizeExceededError(BadRequestError):
    def __init__(self, size: int, max_size: int):
        super().__init__(f"File size {size} bytes exceeds maximum allowed size {max_size} bytes")
