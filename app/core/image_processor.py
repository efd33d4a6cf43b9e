"""
Image input handling for MediClear.

Report photos arrive as base64 strings, usually as data URIs produced by
the browser (``data:image/png;base64,....``). This module strips the
header, decodes the payload and works out which content type to declare
to the model.
"""

import base64
import binascii
import io
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from app.core.errors import InputValidationError
from app.utils.logger import get_logger

logger = get_logger("image_processor")

_DATA_URI_HEADER = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?$", re.IGNORECASE)


@dataclass
class ImageData:
    """Decoded image ready to be sent to the model."""

    data: bytes  # Raw image bytes
    base64_data: str  # Payload without any data-URI header
    mime_type: str
    mime_source: str  # "data_uri", "content" or "default"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class ImageProcessor:
    """
    Decodes base64 report images and detects their content type.

    Detection order:
    - mime type in the data-URI header
    - format recognised by Pillow from the decoded bytes
    - DEFAULT_MIME_TYPE, logged as a warning
    """

    DEFAULT_MIME_TYPE = "image/jpeg"

    # Image types accepted by Gemini
    SUPPORTED_MIME_TYPES = {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/heic",
        "image/heif",
    }

    PIL_FORMATS = {
        "JPEG": "image/jpeg",
        "MPO": "image/jpeg",
        "PNG": "image/png",
        "WEBP": "image/webp",
    }

    def split_data_uri(self, image: str) -> Tuple[Optional[str], str]:
        """
        Separate an optional ``<metadata>,`` header from the base64 payload.

        Args:
            image: Base64 string, with or without a data-URI header

        Returns:
            Tuple of (header or None, payload)
        """
        if "," not in image:
            return None, image
        header, payload = image.split(",", 1)
        return header.strip(), payload

    def _mime_from_header(self, header: Optional[str]) -> Optional[str]:
        if not header:
            return None
        match = _DATA_URI_HEADER.match(header)
        if not match or not match.group("mime"):
            return None
        mime = match.group("mime").lower()
        return "image/jpeg" if mime == "image/jpg" else mime

    def _mime_from_content(self, data: bytes) -> Optional[str]:
        try:
            with Image.open(io.BytesIO(data)) as img:
                image_format = img.format
        except (UnidentifiedImageError, OSError):
            return None
        if image_format is None:
            return None
        return self.PIL_FORMATS.get(image_format, f"image/{image_format.lower()}")

    def load(self, image: str) -> ImageData:
        """
        Decode a base64 image and detect its content type.

        Args:
            image: Base64 image data, optionally prefixed with a data-URI header

        Returns:
            ImageData with prefix-free base64 payload and mime type

        Raises:
            InputValidationError: If the data is not base64, is empty, or
                is an image type the model does not accept
        """
        header, payload = self.split_data_uri(image.strip())
        payload = "".join(payload.split())

        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InputValidationError("The uploaded image could not be read.") from e

        if not data:
            raise InputValidationError("The uploaded image is empty.")

        mime_type = self._mime_from_header(header)
        mime_source = "data_uri"

        if mime_type is None:
            mime_type = self._mime_from_content(data)
            mime_source = "content"

        if mime_type is None:
            mime_type = self.DEFAULT_MIME_TYPE
            mime_source = "default"
            logger.warning(
                "Image type could not be determined, declaring default",
                mime_type=mime_type,
                size=len(data)
            )

        if mime_type not in self.SUPPORTED_MIME_TYPES:
            raise InputValidationError(
                f"Unsupported image type: {mime_type}. Please upload a JPEG, PNG or WEBP image."
            )

        logger.info(
            "Image decoded",
            mime_type=mime_type,
            mime_source=mime_source,
            size=len(data)
        )

        return ImageData(
            data=data,
            base64_data=payload,
            mime_type=mime_type,
            mime_source=mime_source
        )


# Singleton instance for easy access
image_processor = ImageProcessor()
