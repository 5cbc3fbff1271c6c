"""
File upload utilities for handling image validation.
Provides filename sanitising and Pillow-based checks of uploaded images.
"""

import io
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from PIL import Image
from fastapi import UploadFile

from marketplace.config import get_settings
from marketplace.utils.exceptions import (
    ValidationError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)

settings = get_settings()

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    """
    Reduce a client-supplied filename to a safe basename.

    Directory parts are dropped and anything outside ``[A-Za-z0-9._-]``
    becomes an underscore.
    """
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "upload"


@dataclass
class ValidatedImage:
    """An upload that passed validation, with its bytes already read."""
    filename: str
    content: bytes
    mime_type: str
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.content)


class FileValidator:
    """Utility class for file validation operations."""

    # Supported image formats and their MIME types
    SUPPORTED_FORMATS: Dict[str, List[str]] = {
        'image/jpeg': ['.jpg', '.jpeg'],
        'image/png': ['.png'],
        'image/webp': ['.webp']
    }

    PIL_FORMATS = {
        'image/jpeg': 'jpeg',
        'image/png': 'png',
        'image/webp': 'webp'
    }

    # Image dimension constraints
    MIN_WIDTH = 100
    MIN_HEIGHT = 100
    MAX_WIDTH = 10000
    MAX_HEIGHT = 10000

    @classmethod
    def validate_file_extension(cls, filename: str) -> str:
        """
        Validate file extension.

        Args:
            filename: Name of the file

        Returns:
            Lowercase file extension

        Raises:
            ValidationError: If extension is not supported
        """
        if not filename:
            raise ValidationError("Filename is required")

        extension = Path(filename).suffix.lower()
        if not extension:
            raise ValidationError("File must have an extension")

        supported_extensions = [ext for exts in cls.SUPPORTED_FORMATS.values() for ext in exts]
        if extension not in supported_extensions:
            raise ValidationError(
                f"File extension '{extension}' not supported. "
                f"Supported extensions: {', '.join(supported_extensions)}"
            )

        return extension

    @classmethod
    def validate_mime_type(cls, mime_type: str, allowed: Optional[List[str]] = None) -> str:
        """
        Validate MIME type against the configured allow-list.

        Raises:
            UnsupportedFileTypeError: If MIME type is not supported
        """
        allowed_types = [t for t in (allowed or settings.allowed_file_types) if t in cls.SUPPORTED_FORMATS]
        if mime_type not in allowed_types:
            raise UnsupportedFileTypeError(mime_type or "unknown", allowed_types)
        return mime_type

    @classmethod
    def validate_file_size(cls, file_size: int, max_size: Optional[int] = None) -> int:
        """
        Validate file size.

        Raises:
            ValidationError: If the file is empty
            FileSizeExceededError: If file size exceeds limit
        """
        if file_size <= 0:
            raise ValidationError("File size must be greater than 0")

        max_allowed = max_size or settings.max_file_size
        if file_size > max_allowed:
            raise FileSizeExceededError(file_size, max_allowed)

        return file_size

    @classmethod
    def validate_image_dimensions(cls, width: int, height: int) -> Tuple[int, int]:
        if width < cls.MIN_WIDTH or height < cls.MIN_HEIGHT:
            raise ValidationError(
                f"Image size {width}x{height}px is below minimum {cls.MIN_WIDTH}x{cls.MIN_HEIGHT}px"
            )

        if width > cls.MAX_WIDTH or height > cls.MAX_HEIGHT:
            raise ValidationError(
                f"Image size {width}x{height}px exceeds maximum {cls.MAX_WIDTH}x{cls.MAX_HEIGHT}px"
            )

        return width, height

    @classmethod
    def validate_image_bytes(cls, content: bytes, filename: str, mime_type: str) -> ValidatedImage:
        """
        Comprehensive validation of an uploaded image.

        Args:
            content: Raw file bytes
            filename: Client-supplied filename
            mime_type: Client-declared MIME type

        Returns:
            ValidatedImage carrying the bytes and detected dimensions

        Raises:
            ValidationError: If any validation fails
        """
        extension = cls.validate_file_extension(filename)
        mime_type = cls.validate_mime_type(mime_type)

        if extension not in cls.SUPPORTED_FORMATS[mime_type]:
            raise ValidationError(
                f"File extension '{extension}' doesn't match MIME type '{mime_type}'"
            )

        cls.validate_file_size(len(content))

        try:
            with Image.open(io.BytesIO(content)) as img:
                width, height = cls.validate_image_dimensions(*img.size)
                pil_format = img.format.lower() if img.format else ""
        except ValidationError:
            raise
        except Exception as e:
            raise ValidationError(f"Invalid image file: {str(e)}")

        if pil_format != cls.PIL_FORMATS[mime_type]:
            raise ValidationError(
                f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'"
            )

        return ValidatedImage(
            filename=filename,
            content=content,
            mime_type=mime_type,
            width=width,
            height=height,
        )

    @classmethod
    async def validate_upload_file(cls, file: UploadFile) -> ValidatedImage:
        """
        Read and validate a FastAPI upload.

        Raises:
            ValidationError: If any validation fails
        """
        if not file.filename:
            raise ValidationError("Filename is required")

        await file.seek(0)
        content = await file.read()
        return cls.validate_image_bytes(content, file.filename, file.content_type or "")

    @classmethod
    async def validate_upload_files(cls, files: Optional[List[UploadFile]]) -> List[ValidatedImage]:
        """
        Validate every non-empty upload of a multipart request.

        Browsers submit an unnamed empty part when no file was picked;
        such parts are skipped.
        """
        validated = []
        for file in files or []:
            if not file.filename:
                continue
            validated.append(await cls.validate_upload_file(file))
        return validated
