from photo_uploader.models.uploading import UploadPhotoRequest, UploadStatus
from photo_uploader.uploader import create_persistence_worker, create_photo_uploader
from photo_uploader.utils.exceptions import (
    ConfigurationError,
    MissingChunkAtAssembly,
    PersistenceWriteFailure,
    PhotoUploaderError,
    StoreUnavailable,
)

__all__ = [
    "ConfigurationError",
    "MissingChunkAtAssembly",
    "PersistenceWriteFailure",
    "PhotoUploaderError",
    "StoreUnavailable",
    "UploadPhotoRequest",
    "UploadStatus",
    "create_persistence_worker",
    "create_photo_uploader",
]
