"""
Validation utilities shared by services and schemas.
Provides required-text checks, status normalisation and the password policy.
"""

from enum import Enum
from typing import Any, Optional, Type, Union

from marketplace.utils.exceptions import ValidationError

MAX_STATUS_LENGTH = 50


class ValidationUtils:
    """
    Utility class for common validation operations.
    Raises ValidationError so services surface a 422 to callers.
    """

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        max_length: Optional[int] = None,
        required: bool = True
    ) -> str:
        """
        Validate and trim a text field.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            max_length: Maximum length after trimming
            required: Whether an empty value is rejected

        Returns:
            Trimmed string

        Raises:
            ValidationError: If the value is missing or too long
        """
        text = str(value).strip() if value is not None else ""

        if required and not text:
            raise ValidationError(f"{field_name} is required")

        if max_length is not None and len(text) > max_length:
            raise ValidationError(f"{field_name} must be at most {max_length} characters")

        return text

    @staticmethod
    def normalize_status(value: Union[str, Enum], known: Type[Enum]) -> str:
        """
        Normalise a free-form status against a set of well-known values.

        Known statuses match case-insensitively and come back in canonical
        casing; any other non-empty text is kept as given (trimmed).

        Raises:
            ValidationError: If the status is empty or too long
        """
        if isinstance(value, known):
            return value.value

        text = ValidationUtils.validate_string(value, "Status", max_length=MAX_STATUS_LENGTH)

        for member in known:
            if member.value.lower() == text.lower():
                return member.value
        return text


def check_password_strength(password: str) -> str:
    """
    Password policy: at least 8 characters with a letter and a digit.

    Raises:
        ValueError: If the password does not meet the policy
    """
    if not password or len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")

    if not any(c.isalpha() for c in password):
        raise ValueError("Password must contain at least one letter")

    if not any(c.isdigit() for c in password):
        raise ValueError("Password must contain at least one number")

    return password
