"""
Image Attachments

Profile pictures and payment receipts are stored inside the portfolio
document itself, as base64 data URLs.

DESIGN DECISION: Uploads are downscaled before encoding. Every save
rewrites the whole document, so a few phone photos at full resolution
would make each write several megabytes.

This service handles:
1. Type and size checks against the configured limits
2. Decoding with Pillow (rejects files that aren't really images)
3. Downscaling to the configured longest edge
4. Re-encoding and wrapping as a data URL
"""

import base64
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from investtrack.config import get_settings


MIME_BY_FORMAT = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}

EXTENSION_TO_FORMAT = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
}


class AttachmentError(Exception):
    """The uploaded file can't be stored as an attachment."""
    pass


def _format_from_filename(filename: str) -> Optional[str]:
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return EXTENSION_TO_FORMAT.get(extension)


def encode_image_attachment(
    image_bytes: bytes,
    filename: str,
    max_dimension: Optional[int] = None,
) -> str:
    """
    Turn an uploaded image into a data URL suitable for storage.

    Args:
        image_bytes: Raw uploaded file
        filename: Original file name (used for the type check)
        max_dimension: Longest edge in pixels; defaults to settings

    Returns:
        "data:<mime>;base64,<payload>"

    Raises:
        AttachmentError: If the file is too large, of an unsupported
            type, or not a readable image
    """
    settings = get_settings().app
    max_dimension = max_dimension or settings.attachment_max_dimension

    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension not in settings.supported_formats_list:
        raise AttachmentError(
            f"Unsupported file type '{extension or filename}'. "
            f"Allowed: {', '.join(settings.supported_formats_list)}"
        )
    if len(image_bytes) > settings.max_upload_size_bytes:
        raise AttachmentError(
            f"File is larger than {settings.max_upload_size_mb} MB"
        )

    try:
        img = Image.open(BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise AttachmentError(f"Could not read image: {e}") from e

    output_format = img.format if img.format in MIME_BY_FORMAT else _format_from_filename(filename)
    if output_format is None:
        raise AttachmentError(f"Unsupported image format: {img.format}")

    img.thumbnail((max_dimension, max_dimension))

    # JPEG has no alpha channel
    if output_format == "JPEG" and img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buffer = BytesIO()
    img.save(buffer, format=output_format)
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:{MIME_BY_FORMAT[output_format]};base64,{payload}"


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """
    Split a stored data URL back into (mime type, raw bytes).

    Raises:
        AttachmentError: If the value isn't a base64 data URL
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise AttachmentError("Not a base64 data URL")
    try:
        return header[len("data:"):-len(";base64")], base64.b64decode(payload)
    except ValueError as e:
        raise AttachmentError(f"Corrupt attachment: {e}") from e
