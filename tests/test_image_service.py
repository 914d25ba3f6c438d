"""
Tests for image validation and download.
"""
import asyncio
import base64
from unittest.mock import patch

import httpx
import pytest

from food_analyzer.core.errors import InvalidImageError
from food_analyzer.services import image_service


class TestLoadImage:
    """Tests for validating uploaded image data."""

    def test_png_is_passed_through(self, png_bytes):
        data, mime_type = image_service.load_image(png_bytes)

        assert mime_type == "image/png"
        assert base64.b64decode(data) == png_bytes

    def test_unsupported_format_is_reencoded_as_jpeg(self, bmp_bytes):
        data, mime_type = image_service.load_image(bmp_bytes)

        assert mime_type == "image/jpeg"
        assert base64.b64decode(data)[:2] == b"\xff\xd8"

    def test_empty_payload_is_rejected(self):
        with pytest.raises(InvalidImageError, match="No image"):
            image_service.load_image(b"")

    def test_non_image_is_rejected(self):
        with pytest.raises(InvalidImageError, match="not a supported image"):
            image_service.load_image(b"%PDF-1.4 definitely not a photo")

    def test_oversized_payload_is_rejected(self, png_bytes):
        with patch.object(image_service.settings, "MAX_IMAGE_BYTES", 10):
            with pytest.raises(InvalidImageError, match="too large"):
                image_service.load_image(png_bytes)

    def test_declared_dimensions_beyond_pillow_limit_are_rejected(self, huge_header_png_bytes):
        with pytest.raises(InvalidImageError, match="dimensions too large"):
            image_service.load_image(huge_header_png_bytes)

    def test_pixel_cap_applies_before_reencoding(self, bmp_bytes):
        with patch.object(image_service.settings, "MAX_IMAGE_PIXELS", 100), \
                patch.object(image_service, "_to_jpeg") as mock_to_jpeg:
            with pytest.raises(InvalidImageError, match="16x16 exceeds 100 pixels"):
                image_service.load_image(bmp_bytes)

        mock_to_jpeg.assert_not_called()


class TestDownloadImage:
    """Tests for downloading images by URL."""

    def _transport(self, content: bytes, content_type: str, status_code: int = 200):
        def handler(request):
            return httpx.Response(status_code, content=content, headers={"content-type": content_type})
        return httpx.MockTransport(handler)

    def _download(self, transport, url="https://example.com/meal.png"):
        real_client = httpx.AsyncClient

        def client_factory(**kwargs):
            return real_client(transport=transport, **kwargs)

        with patch.object(image_service.httpx, "AsyncClient", side_effect=client_factory):
            return asyncio.run(image_service.download_image(url))

    def test_downloads_image(self, png_bytes):
        assert self._download(self._transport(png_bytes, "image/png")) == png_bytes

    def test_rejects_non_image_content_type(self):
        with pytest.raises(InvalidImageError, match="expected an image"):
            self._download(self._transport(b"<html></html>", "text/html"))

    def test_rejects_oversized_download(self, png_bytes):
        with patch.object(image_service.settings, "MAX_IMAGE_BYTES", 10):
            with pytest.raises(InvalidImageError, match="too large"):
                self._download(self._transport(png_bytes, "image/png"))

    def test_http_error_propagates(self):
        with pytest.raises(httpx.HTTPStatusError):
            self._download(self._transport(b"", "image/png", status_code=404))
