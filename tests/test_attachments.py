"""Tests for image attachments."""

from io import BytesIO

import pytest
from PIL import Image

from investtrack.services.image import (
    AttachmentError,
    decode_data_url,
    encode_image_attachment,
)


def make_image(size, fmt="PNG", mode="RGB"):
    buffer = BytesIO()
    Image.new(mode, size, color=(200, 30, 30) if mode == "RGB" else (200, 30, 30, 128)).save(
        buffer, format=fmt
    )
    return buffer.getvalue()


class TestEncodeAttachment:

    def test_large_image_is_downscaled(self):
        data_url = encode_image_attachment(make_image((2000, 1000)), "receipt.png")

        assert data_url.startswith("data:image/png;base64,")
        mime, raw = decode_data_url(data_url)
        assert mime == "image/png"
        assert Image.open(BytesIO(raw)).size == (512, 256)

    def test_small_image_keeps_size(self):
        data_url = encode_image_attachment(make_image((100, 80), "JPEG"), "me.jpg")
        _, raw = decode_data_url(data_url)
        assert Image.open(BytesIO(raw)).size == (100, 80)
        assert data_url.startswith("data:image/jpeg;base64,")

    def test_custom_max_dimension(self):
        data_url = encode_image_attachment(make_image((300, 300)), "a.png", max_dimension=64)
        _, raw = decode_data_url(data_url)
        assert Image.open(BytesIO(raw)).size == (64, 64)

    def test_unsupported_extension(self):
        with pytest.raises(AttachmentError, match="Unsupported"):
            encode_image_attachment(make_image((10, 10)), "scan.gif")

    def test_not_an_image(self):
        with pytest.raises(AttachmentError, match="Could not read"):
            encode_image_attachment(b"definitely not a picture", "photo.png")

    def test_too_large(self):
        too_big = b"\0" * (5 * 1024 * 1024 + 1)
        with pytest.raises(AttachmentError, match="larger than"):
            encode_image_attachment(too_big, "huge.png")


class TestDecodeDataUrl:

    def test_rejects_plain_urls(self):
        with pytest.raises(AttachmentError):
            decode_data_url("https://example.com/a.png")
