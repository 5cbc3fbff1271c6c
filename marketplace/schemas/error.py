"""
Error response schemas for API documentation and consistent error formatting.
Provides standardized error response models for OpenAPI documentation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(
        None,
        description="Field name that caused the error",
        examples=["body -> email"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Invalid email format"]
    )

    type: Optional[str] = Field(
        None,
        description="Error type identifier",
        examples=["value_error"]
    )


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])

    message: str = Field(..., description="Human-readable error message", examples=["Request validation failed"])

    timestamp: str = Field(..., description="Error timestamp in ISO format", examples=["2024-01-01T00:00:00Z"])

    request_id: Optional[str] = Field(None, description="Unique request identifier for tracking", examples=["abc12345"])

    details: Optional[List[ErrorDetail]] = Field(
        None,
        description="Detailed error information for validation errors"
    )


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


def _example(code: str, message: str) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "timestamp": "2024-01-01T00:00:00Z",
            "request_id": "abc12345"
        }
    }


# Common error response examples for documentation
COMMON_ERROR_RESPONSES = {
    400: ("Bad Request - Invalid request parameters", "BAD_REQUEST", "Invalid request parameters"),
    401: ("Unauthorized - Authentication required", "UNAUTHORIZED", "Authentication token required"),
    403: ("Forbidden - Insufficient permissions", "FORBIDDEN", "Insufficient permissions to edit property"),
    404: ("Not Found - Resource does not exist", "NOT_FOUND", "Property not found with ID: abc"),
    409: ("Conflict - Resource already exists", "CONFLICT", "User with identifier 'a@b.com' already exists"),
    422: ("Unprocessable Entity - Validation failed", "VALIDATION_ERROR", "Request validation failed"),
    500: ("Internal Server Error", "INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."),
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    responses = {}
    for code in status_codes:
        if code not in COMMON_ERROR_RESPONSES:
            continue
        description, error_code, message = COMMON_ERROR_RESPONSES[code]
        responses[code] = {
            "description": description,
            "model": APIErrorResponse,
            "content": {"application/json": {"example": _example(error_code, message)}},
        }
    return responses


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get authentication and authorization error response schemas."""
    return get_error_responses(401, 403)


def get_common_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get common error response schemas for most endpoints."""
    return get_error_responses(400, 401, 403, 404, 422, 500)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 409, 422, 500)
