import logging

from bullmq import Queue
from redis.exceptions import RedisError

from photo_uploader.clients.chunk_store import ChunkStore
from photo_uploader.models.uploading import UploadPhotoJobPayload, UploadStatus
from photo_uploader.utils.exceptions import StoreUnavailable


class CompletionDispatcher:
    """
    Hands an assembled upload to the persistence queue and clears its chunks.

    Without the completion barrier two submissions that both see the last
    chunk may both dispatch; storage writes are overwrite-by-path so the
    duplicate job is harmless. With ``completion_barrier`` set, deleting the
    metadata key decides which submission enqueues.
    """

    def __init__(
        self,
        store: ChunkStore,
        queue: Queue,
        storage_endpoint: str,
        bucket_name: str,
        job_name: str = "upload_photo",
        job_attempts: int = 2,
        completion_barrier: bool = False,
        logger=None,
    ) -> None:
        self.__store = store
        self.__queue = queue
        self.__storage_endpoint = storage_endpoint
        self.__bucket_name = bucket_name
        self.__job_name = job_name
        self.__job_attempts = job_attempts
        self.__completion_barrier = completion_barrier
        self.__logger = logger or logging.getLogger("info_logger")

    def file_path(self, photo_id: str, directory: str, extension: str) -> str:
        file_name = f"{photo_id}.{extension}"
        return f"{directory}/{file_name}"

    def file_url(self, file_path: str) -> str:
        return f"{self.__storage_endpoint}/{self.__bucket_name}/{file_path}"

    async def dispatch_completion(
        self,
        photo_id: str,
        directory: str,
        extension: str,
        total_chunks: int,
        assembled_base64: str,
    ) -> UploadStatus:
        file_path = self.file_path(photo_id, directory, extension)
        file_url = self.file_url(file_path)

        should_enqueue = True
        if self.__completion_barrier:
            should_enqueue = await self.__store.claim_completion(photo_id)

        if should_enqueue:
            payload = UploadPhotoJobPayload(file_path=file_path, base64_data=assembled_base64)
            try:
                job = await self.__queue.add(
                    self.__job_name,
                    payload.model_dump(by_alias=True),
                    {"attempts": self.__job_attempts},
                )
            except RedisError as e:
                raise StoreUnavailable(f"Redis Error: {str(e)}") from e
            self.__logger.info(f"Queued job {job.id} for {file_path}")
        else:
            self.__logger.info(f"{photo_id} already dispatched by a concurrent submission")

        try:
            await self.__store.clear_upload(photo_id)
        except StoreUnavailable as e:
            # leftover keys still expire through their TTL
            self.__logger.error(f"Failed to clean up chunks for {photo_id}: {e}")

        return UploadStatus.complete(url=file_url, total_chunks=total_chunks)

    async def close(self) -> None:
        await self.__queue.close()
