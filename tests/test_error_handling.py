"""
Tests for error envelope rendering.
"""

import json

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError

from marketplace.services.error_handler import ErrorHandlerService
from marketplace.utils.exceptions import (
    InsufficientPermissionsError,
    PropertyNotFoundError,
    UnauthorizedError,
    ValidationError,
)


def body_of(response) -> dict:
    return json.loads(response.body)


class TestApiExceptions:
    def test_not_found(self):
        response = ErrorHandlerService.handle_api_exception(PropertyNotFoundError("abc"))

        assert response.status_code == 404
        error = body_of(response)["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["message"] == "Property not found with ID: abc"
        assert error["timestamp"].endswith("Z")
        assert len(error["request_id"]) == 8
        assert "details" not in error

    def test_forbidden_and_unauthorized(self):
        forbidden = ErrorHandlerService.handle_api_exception(InsufficientPermissionsError("delete request"))
        assert forbidden.status_code == 403
        assert body_of(forbidden)["error"]["message"] == "Insufficient permissions to delete request"

        unauthorized = ErrorHandlerService.handle_api_exception(UnauthorizedError())
        assert unauthorized.status_code == 401
        assert unauthorized.headers["www-authenticate"] == "Bearer"

    def test_validation_details(self):
        exc = ValidationError("Property data is invalid", field_errors=[
            {"field": "price", "message": "must be positive", "type": "greater_than_equal"}
        ])
        response = ErrorHandlerService.handle_api_exception(exc)

        assert response.status_code == 422
        assert body_of(response)["error"]["details"][0]["field"] == "price"

    def test_request_validation_errors(self):
        response = ErrorHandlerService.handle_validation_error([
            {"loc": ("body", "notes"), "msg": "Field required", "type": "missing"}
        ])

        error = body_of(response)["error"]
        assert response.status_code == 422
        assert error["details"] == [{"field": "body -> notes", "message": "Field required", "type": "missing"}]


class TestDatabaseErrors:
    @pytest.mark.parametrize("driver_message,expected", [
        ("UNIQUE constraint failed: users.email", "Email is already registered"),
        ("UNIQUE constraint failed: user_roles.user_id, user_roles.role", "User already holds this role"),
        ("FOREIGN KEY constraint failed", "Referenced user or property does not exist"),
        ("something else entirely", "Data integrity constraint violation"),
    ])
    def test_integrity_errors(self, driver_message, expected):
        exc = IntegrityError("INSERT ...", {}, Exception(driver_message))
        response = ErrorHandlerService.handle_database_error(exc)

        assert response.status_code == 409
        error = body_of(response)["error"]
        assert error["code"] == "INTEGRITY_ERROR"
        assert error["message"] == expected

    def test_other_database_errors_hide_details(self):
        exc = OperationalError("SELECT ...", {}, Exception("connection refused on 10.0.0.5"))
        response = ErrorHandlerService.handle_database_error(exc)

        assert response.status_code == 500
        assert body_of(response)["error"]["message"] == "Database operation failed"


class TestOtherErrors:
    def test_http_exception(self):
        response = ErrorHandlerService.handle_http_exception(HTTPException(status_code=503, detail="Database connection failed"))
        assert response.status_code == 503
        assert body_of(response)["error"]["code"] == "HTTP_503"

    def test_unexpected_error(self):
        response = ErrorHandlerService.handle_unexpected_error(RuntimeError("secret internals"))
        assert response.status_code == 500
        assert "secret" not in body_of(response)["error"]["message"]
