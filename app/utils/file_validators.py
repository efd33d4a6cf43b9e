"""
File validation utilities for MediClear.

Handles validation of uploaded report images including:
- File size limits
- File extension validation
- Corruption detection
"""

import io
from pathlib import Path
from typing import Optional

from PIL import Image

from app.config import settings
from app.core.errors import InputValidationError


class FileValidationError(InputValidationError):
    """Raised when file validation fails."""

    default_code = "VALIDATION_ERROR"


class FileValidator:
    """
    Validates uploaded report images.

    Ensures files are:
    - Not empty and within size limits
    - Have allowed extensions
    - Are not corrupt
    """

    # Pillow format name -> declared content type
    FORMAT_MIME_TYPES = {
        "JPEG": "image/jpeg",
        "MPO": "image/jpeg",
        "PNG": "image/png",
        "WEBP": "image/webp",
    }

    def __init__(self):
        self.max_file_size = settings.max_image_size_bytes
        self.image_extensions = settings.image_extensions

    def validate_file_size(self, file_content: bytes, filename: str) -> bool:
        """
        Check if file is within size limits.

        Raises:
            FileValidationError: If file is empty or exceeds size limit
        """
        if len(file_content) == 0:
            raise FileValidationError("Empty file uploaded", error_code="EMPTY_FILE")
        if len(file_content) > self.max_file_size:
            raise FileValidationError(
                f"File '{filename}' exceeds maximum size of {settings.max_image_size_mb}MB",
                error_code="FILE_TOO_LARGE"
            )
        return True

    def validate_extension(self, filename: str) -> bool:
        """
        Check if file has an allowed image extension.

        Raises:
            FileValidationError: If extension not allowed
        """
        ext = Path(filename).suffix.lower()
        if ext not in self.image_extensions:
            raise FileValidationError(
                f"File extension '{ext}' not allowed. "
                f"Allowed: {', '.join(self.image_extensions)}",
                error_code="INVALID_EXTENSION"
            )
        return True

    def detect_mime_type(self, file_content: bytes) -> Optional[str]:
        """Detect the image content type from its bytes, None if unknown."""
        try:
            with Image.open(io.BytesIO(file_content)) as img:
                return self.FORMAT_MIME_TYPES.get(img.format or "")
        except Exception:
            return None

    def validate_image(self, file_content: bytes, filename: str) -> str:
        """
        Validate an uploaded report image.

        Args:
            file_content: Raw image bytes
            filename: Original filename

        Returns:
            Detected mime type

        Raises:
            FileValidationError: If any check fails
        """
        self.validate_extension(filename)
        self.validate_file_size(file_content, filename)

        try:
            img = Image.open(io.BytesIO(file_content))
            img.verify()  # verify() invalidates the image object
        except Exception as e:
            raise FileValidationError(
                "The uploaded file is not a readable image",
                error_code="CORRUPT_IMAGE"
            ) from e

        mime_type = self.detect_mime_type(file_content)
        if mime_type is None:
            raise FileValidationError(
                f"Unsupported image format: {filename}",
                error_code="UNSUPPORTED_IMAGE"
            )
        return mime_type


# Singleton instance for easy access
file_validator = FileValidator()
