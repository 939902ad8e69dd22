import logging
from typing import List, Optional

from photo_uploader.clients.chunk_store import ChunkStore
from photo_uploader.models.uploading import UploadMetadata, UploadPhotoRequest, UploadStatus
from photo_uploader.utils.completion_dispatcher import CompletionDispatcher
from photo_uploader.utils.exceptions import MissingChunkAtAssembly


debug_log = logging.getLogger("debug_logger")


def strip_data_url_header(content: str) -> str:
    """
    Drop a single ``data:<mime>;base64,`` header sent in front of the first chunk.

    Only a payload with exactly one comma is treated as prefixed; anything
    else is returned as is.
    """
    if content.count(",") == 1:
        return content.split(",", 1)[1]
    return content


class UploadController:
    """
    Stores incoming chunks and assembles the photo once every index is present.

    The received-chunk count always comes from a scan of the store, never from
    in-process state, so any number of API processes can share an upload.
    """

    def __init__(self, store: ChunkStore, dispatcher: CompletionDispatcher, chunk_ttl: Optional[int] = None) -> None:
        self.__store = store
        self.__dispatcher = dispatcher
        self.__chunk_ttl = chunk_ttl

    async def _read_chunks_in_order(self, photo_id: str, total_chunks: int) -> List[str]:
        parts = []
        for i in range(total_chunks):
            chunk = await self.__store.get_chunk(photo_id, i)
            if chunk is None:
                raise MissingChunkAtAssembly(photo_id, i)
            parts.append(chunk)
        return parts

    async def submit_chunk(self, data: UploadPhotoRequest) -> UploadStatus:
        photo_id = data.photo_id

        await self.__store.put_chunk(photo_id, data.chunk_index, data.photo, self.__chunk_ttl)
        await self.__store.put_metadata(
            photo_id,
            UploadMetadata(total_chunks=data.total_chunks, photo_id=photo_id, directory=data.directory),
            self.__chunk_ttl,
        )

        chunk_count = await self.__store.count_chunks(photo_id)
        debug_log.debug(f"{photo_id}: chunk {data.chunk_index} stored, {chunk_count}/{data.total_chunks}")

        if chunk_count < data.total_chunks:
            return UploadStatus.partial(received_chunks=chunk_count, total_chunks=data.total_chunks)

        parts = await self._read_chunks_in_order(photo_id, data.total_chunks)
        complete_base64 = strip_data_url_header("".join(parts))

        return await self.__dispatcher.dispatch_completion(
            photo_id=photo_id,
            directory=data.directory,
            extension=data.extension,
            total_chunks=data.total_chunks,
            assembled_base64=complete_base64,
        )

    async def get_upload_status(self, photo_id: str) -> Optional[UploadStatus]:
        """
        Progress of an upload still held in the store, or ``None``.

        A dispatched upload has its keys cleared, so whatever is found here was
        never handed to the queue. That includes the case where every chunk is
        present but the enqueue failed: the count then equals ``total_chunks``
        and the status stays ``partial`` until a resubmitted chunk completes it.
        """
        metadata = await self.__store.get_metadata(photo_id)
        if metadata is None:
            return None
        chunk_count = await self.__store.count_chunks(photo_id)
        return UploadStatus.partial(received_chunks=chunk_count, total_chunks=metadata.total_chunks)

    async def close(self) -> None:
        await self.__dispatcher.close()
        await self.__store.close()
