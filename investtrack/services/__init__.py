"""Services package."""

from investtrack.services.backup import (
    BackupFormatError,
    backup_filename,
    export_backup,
    export_transactions_csv,
    parse_backup,
)
from investtrack.services.image import (
    AttachmentError,
    decode_data_url,
    encode_image_attachment,
)
from investtrack.services.storage import (
    AppDataRepository,
    ConnectionError,
    InMemoryStorage,
    KeyValueStorageInterface,
    LocalFileStorage,
    StorageError,
)

__all__ = [
    # Backup and export
    "BackupFormatError",
    "backup_filename",
    "export_backup",
    "export_transactions_csv",
    "parse_backup",
    # Image attachments
    "AttachmentError",
    "decode_data_url",
    "encode_image_attachment",
    # Storage services
    "AppDataRepository",
    "ConnectionError",
    "InMemoryStorage",
    "KeyValueStorageInterface",
    "LocalFileStorage",
    "StorageError",
]
