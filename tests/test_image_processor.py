"""
Tests for base64 image decoding and content type detection.
"""

import base64
import io

import pytest
from PIL import Image

from app.core.errors import InputValidationError
from app.core.image_processor import ImageProcessor


def make_image_bytes(image_format: str = "PNG") -> bytes:
    """Render a small solid image in the given format."""
    buffer = io.BytesIO()
    Image.new("RGB", (64, 64), color=(200, 200, 200)).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def processor():
    return ImageProcessor()


class TestDataUriHandling:
    """Test stripping of data-URI headers."""

    def test_prefix_stripped(self, processor):
        """Only the base64 payload is kept."""
        raw = make_image_bytes("PNG")
        encoded = base64.b64encode(raw).decode("ascii")

        image = processor.load(f"data:image/png;base64,{encoded}")

        assert image.base64_data == encoded
        assert image.data == raw

    def test_mime_type_from_header(self, processor):
        """The header's mime type is declared."""
        encoded = base64.b64encode(make_image_bytes("PNG")).decode("ascii")
        image = processor.load(f"data:image/png;base64,{encoded}")

        assert image.mime_type == "image/png"
        assert image.mime_source == "data_uri"

    def test_jpg_alias_normalized(self, processor):
        """image/jpg is declared as image/jpeg."""
        encoded = base64.b64encode(make_image_bytes("JPEG")).decode("ascii")
        image = processor.load(f"data:image/jpg;base64,{encoded}")

        assert image.mime_type == "image/jpeg"

    def test_split_without_prefix(self, processor):
        """Bare base64 has no header."""
        assert processor.split_data_uri("QUJD") == (None, "QUJD")


class TestContentDetection:
    """Test detection when no header is present."""

    def test_bare_png_detected(self, processor):
        """PNG bytes are not mislabeled as JPEG."""
        encoded = base64.b64encode(make_image_bytes("PNG")).decode("ascii")
        image = processor.load(encoded)

        assert image.mime_type == "image/png"
        assert image.mime_source == "content"

    def test_bare_jpeg_detected(self, processor):
        """JPEG bytes are detected as JPEG."""
        encoded = base64.b64encode(make_image_bytes("JPEG")).decode("ascii")
        assert processor.load(encoded).mime_type == "image/jpeg"

    def test_unknown_bytes_fall_back_to_default(self, processor):
        """Unrecognised content is declared with the default type."""
        encoded = base64.b64encode(b"definitely not an image").decode("ascii")
        image = processor.load(encoded)

        assert image.mime_type == ImageProcessor.DEFAULT_MIME_TYPE
        assert image.mime_source == "default"

    def test_header_without_mime_uses_content(self, processor):
        """A header without a mime type falls through to detection."""
        encoded = base64.b64encode(make_image_bytes("PNG")).decode("ascii")
        image = processor.load(f"data:;base64,{encoded}")

        assert image.mime_type == "image/png"
        assert image.mime_source == "content"


class TestRejectedInput:
    """Test input that cannot be sent to the model."""

    def test_invalid_base64_rejected(self, processor):
        with pytest.raises(InputValidationError):
            processor.load("data:image/png;base64,@@not-base64@@")

    def test_empty_payload_rejected(self, processor):
        with pytest.raises(InputValidationError):
            processor.load("data:image/png;base64,")

    def test_unsupported_type_rejected(self, processor):
        """GIF uploads are rejected rather than relabeled."""
        encoded = base64.b64encode(make_image_bytes("GIF")).decode("ascii")
        with pytest.raises(InputValidationError):
            processor.load(f"data:image/gif;base64,{encoded}")
