"""
MinIO (S3-compatible) object storage used by the persistence worker.
"""
import logging
import mimetypes
from io import BytesIO
from urllib.parse import urlparse

from minio import Minio
from minio.error import S3Error

from photo_uploader.config.config import Settings, settings as default_settings
from photo_uploader.utils.exceptions import PersistenceWriteFailure

logger = logging.getLogger(__name__)


def split_endpoint(endpoint: str) -> tuple[str, bool]:
    """
    Turn a public endpoint URL into the ``host[:port]`` and TLS flag Minio expects.

    ``http://localhost:9000`` -> ``("localhost:9000", False)``. A bare host is
    returned unchanged and treated as plain HTTP.
    """
    parsed = urlparse(endpoint)
    if parsed.scheme and parsed.netloc:
        return parsed.netloc, parsed.scheme == "https"
    return endpoint, False


class StorageClient:
    """Writes objects into a single bucket. Writes overwrite by path."""

    def __init__(self, settings: Settings = default_settings, client: Minio | None = None):
        self.bucket = settings.STORAGE_BUCKET_NAME
        if client is None:
            host, secure = split_endpoint(settings.STORAGE_ENDPOINT)
            client = Minio(
                host,
                access_key=settings.STORAGE_ACCESS_KEY or None,
                secret_key=settings.STORAGE_SECRET_KEY or None,
                secure=secure,
            )
        self.client = client
        logger.info(f"MinIO client initialized: {settings.STORAGE_ENDPOINT}/{self.bucket}")

    def write(self, path: str, data: bytes):
        content_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
        try:
            result = self.client.put_object(
                self.bucket,
                path,
                BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except S3Error as e:
            raise PersistenceWriteFailure(path, str(e)) from e
        logger.info(f"Uploaded {len(data)} bytes to {self.bucket}/{path}")
        return result
