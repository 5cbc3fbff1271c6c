"""
Error rendering for the global exception handlers.
Every error body has the shape {"error": {code, message, timestamp, request_id, details?}}.
"""

from typing import Dict, Any, Optional, List, Tuple
from datetime import datetime, timezone
from fastapi import Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from marketplace.utils.exceptions import APIException, ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)

# (substring of the driver message, user-facing explanation), checked in order
INTEGRITY_MESSAGES: List[Tuple[str, str]] = [
    ("users.email", "Email is already registered"),
    ("uq_users_email", "Email is already registered"),
    ("uq_user_roles_user_role", "User already holds this role"),
    ("user_roles.user_id, user_roles.role", "User already holds this role"),
    ("property_images.url", "Image URL is already in use"),
    ("foreign key", "Referenced user or property does not exist"),
    ("not null", "Required field cannot be empty"),
    ("unique", "Duplicate value for unique field"),
]


class ErrorHandlerService:
    """Turns exceptions into logged, enveloped JSON responses."""

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the error envelope.

        Args:
            error_code: Error code identifier
            message: Human-readable error message
            details: Optional per-field problems
            request_id: Optional identifier for correlating logs

        Returns:
            Envelope dictionary
        """
        response = {
            "error": {
                "code": error_code,
                "message": message,
                "timestamp": ErrorHandlerService._get_current_timestamp(),
            }
        }

        if details:
            response["error"]["details"] = details

        if request_id:
            response["error"]["request_id"] = request_id

        return response

    @staticmethod
    def _respond(
        status_code: int,
        error_code: str,
        message: str,
        request_id: str,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content=ErrorHandlerService.format_error_response(error_code, message, details, request_id),
            headers=headers
        )

    @staticmethod
    def _path(request: Optional[Request]) -> Optional[str]:
        return request.url.path if request else None

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        """
        Render a domain exception raised by a service or dependency.

        Client errors are logged at WARNING; the 5xx range at ERROR.
        """
        request_id = ErrorHandlerService._generate_request_id()
        level = logging.ERROR if exception.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": ErrorHandlerService._path(request)
            }
        )

        details = exception.field_errors if isinstance(exception, ValidationError) else None
        return ErrorHandlerService._respond(
            exception.status_code,
            exception.error_code,
            exception.detail,
            request_id,
            details=details,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(errors: List[Dict[str, Any]], request: Optional[Request] = None) -> JSONResponse:
        """
        Render FastAPI/pydantic request validation errors.

        Args:
            errors: ``RequestValidationError.errors()``
            request: Optional FastAPI request object
        """
        request_id = ErrorHandlerService._generate_request_id()

        details = [
            {
                "field": " -> ".join(str(loc) for loc in error.get("loc", ())),
                "message": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in errors
        ]

        logger.warning(
            f"Validation Error [{request_id}]: {len(details)} field errors",
            extra={"request_id": request_id, "path": ErrorHandlerService._path(request)}
        )

        return ErrorHandlerService._respond(
            422,
            "VALIDATION_ERROR",
            "Request validation failed",
            request_id,
            details=jsonable_encoder(details)
        )

    @staticmethod
    def handle_database_error(exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        """
        Render a store failure without leaking driver details.

        Integrity violations become 409 with a short explanation; anything
        else is a 500.
        """
        request_id = ErrorHandlerService._generate_request_id()

        if isinstance(exception, IntegrityError):
            status_code, error_code = 409, "INTEGRITY_ERROR"
            message = ErrorHandlerService._describe_integrity_error(exception)
        else:
            status_code, error_code = 500, "DATABASE_ERROR"
            message = "Database operation failed"

        logger.error(
            f"Database Error [{request_id}]: {error_code} - {exception}",
            extra={
                "error_code": error_code,
                "request_id": request_id,
                "path": ErrorHandlerService._path(request),
                "exception_type": type(exception).__name__
            },
            exc_info=True
        )

        return ErrorHandlerService._respond(status_code, error_code, message, request_id)

    @staticmethod
    def handle_http_exception(exception: HTTPException, request: Optional[Request] = None) -> JSONResponse:
        """Render plain HTTP errors such as unknown routes or a failed health check."""
        request_id = ErrorHandlerService._generate_request_id()
        logger.warning(
            f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}",
            extra={"request_id": request_id, "path": ErrorHandlerService._path(request)}
        )

        return ErrorHandlerService._respond(
            exception.status_code,
            f"HTTP_{exception.status_code}",
            str(exception.detail),
            request_id,
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        request_id = ErrorHandlerService._generate_request_id()
        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {exception}",
            extra={"request_id": request_id, "path": ErrorHandlerService._path(request)},
            exc_info=exception
        )

        return ErrorHandlerService._respond(
            500,
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred. Please try again later.",
            request_id
        )

    @staticmethod
    def _generate_request_id() -> str:
        return str(uuid.uuid4())[:8]

    @staticmethod
    def _get_current_timestamp() -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    @staticmethod
    def _describe_integrity_error(exception: IntegrityError) -> str:
        error_msg = str(exception.orig).lower()
        for needle, message in INTEGRITY_MESSAGES:
            if needle in error_msg:
                return message
        return "Data integrity constraint violation"
