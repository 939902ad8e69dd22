class PhotoUploaderError(Exception):
    """Base class for every error raised by the uploader."""


class ConfigurationError(PhotoUploaderError):
    """Required storage configuration is missing."""


class StoreUnavailable(PhotoUploaderError):
    """A Redis round trip failed. Resubmitting the same chunk is safe."""


class MissingChunkAtAssembly(PhotoUploaderError):
    """
    The chunk count matched ``totalChunks`` but a chunk was gone at read-back.

    Usually means a key expired between the count and the read. The remaining
    keys are left untouched so the race can be inspected.
    """

    def __init__(self, photo_id: str, chunk_index: int):
        self.photo_id = photo_id
        self.chunk_index = chunk_index
        super().__init__(f"Missing chunk {chunk_index} for photo {photo_id}")


class PersistenceWriteFailure(PhotoUploaderError):
    """The storage backend rejected a write. Only the worker ever sees this."""

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Failed to upload photo {file_path}: {reason}")
