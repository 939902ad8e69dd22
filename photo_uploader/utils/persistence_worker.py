import asyncio
import base64
import binascii
import logging

from bullmq import Worker

from photo_uploader.models.uploading import UploadPhotoJobPayload
from photo_uploader.utils.exceptions import PersistenceWriteFailure


class PersistenceWorker:
    """
    Drains ``upload_photo`` jobs from the bullmq queue and writes the decoded
    photo to storage.

    Outcomes only reach the logs. The upload was already reported complete
    when the job was queued. Retries are bullmq's, driven by the job's
    ``attempts`` option.
    """

    def __init__(self, queue_name: str, storage, connection, concurrency: int = 3, logger=None) -> None:
        self.queue_name = queue_name
        self.__storage = storage
        self.__connection = connection
        self.__concurrency = concurrency
        self.__logger = logger or logging.getLogger("info_logger")
        self.worker = None

    async def upload_photo(self, job, token=None):
        payload = UploadPhotoJobPayload.model_validate(job.data)
        try:
            buffer = base64.b64decode(payload.base64_data)
        except (binascii.Error, ValueError) as e:
            raise PersistenceWriteFailure(payload.file_path, f"invalid base64 payload: {e}") from e

        loop = asyncio.get_running_loop()
        try:
            # storage clients are blocking
            return await loop.run_in_executor(None, self.__storage.write, payload.file_path, buffer)
        except PersistenceWriteFailure:
            raise
        except Exception as e:
            raise PersistenceWriteFailure(payload.file_path, str(e)) from e

    def _on_completed(self, job, result) -> None:
        self.__logger.info(f"Photo uploaded successfully: {job.data.get('filePath')}")

    def _on_failed(self, job, error) -> None:
        # emitted once per failed attempt, retries included
        self.__logger.error(f"Job {job.id} failed with error: {error}")

    def start(self, autorun: bool = True) -> Worker:
        """Create the bullmq worker. With ``autorun`` it starts polling right away."""
        self.worker = Worker(
            self.queue_name,
            self.upload_photo,
            {
                "connection": self.__connection,
                "concurrency": self.__concurrency,
                "autorun": autorun,
            },
        )
        self.worker.on("completed", self._on_completed)
        self.worker.on("failed", self._on_failed)
        self.__logger.info("Upload Worker is ready to process jobs")
        return self.worker

    async def run(self) -> None:
        """Poll the queue until ``close()`` is called."""
        worker = self.worker or self.start(autorun=False)
        await worker.run()

    async def close(self) -> None:
        """Stop taking jobs and wait for the ones in flight."""
        if self.worker is not None:
            await self.worker.close()
