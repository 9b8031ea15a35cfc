"""Image attachment services."""

from investtrack.services.image.attachments import (
    AttachmentError,
    decode_data_url,
    encode_image_attachment,
)

__all__ = [
    "AttachmentError",
    "decode_data_url",
    "encode_image_attachment",
]
