import logging
import re
from typing import Iterable, List, Optional

from redis.exceptions import RedisError

from photo_uploader.models.uploading import UploadMetadata
from photo_uploader.utils.exceptions import StoreUnavailable


debug_log = logging.getLogger("debug_logger")

META_SUFFIX = "meta"

# characters redis treats as glob syntax in MATCH patterns
_GLOB_CHARS = re.compile(r"([*?\[\]\\])")


class ChunkStore:
    """
    Chunk payloads and upload metadata kept in Redis under a per-upload prefix.

    Layout::

        <prefix>:<photoId>:<chunkIndex>   base64 chunk
        <prefix>:<photoId>:meta           {"totalChunks","photoId","directory"}

    Every key carries a TTL so abandoned uploads clean themselves up.
    """

    def __init__(self, redis_client, key_prefix: str = "photo_chunks", ttl: int = 3600) -> None:
        self.__redis = redis_client
        self.__key_prefix = key_prefix
        self.ttl = ttl

    def upload_prefix(self, photo_id: str) -> str:
        return f"{self.__key_prefix}:{photo_id}"

    def chunk_key(self, photo_id: str, chunk_index: int) -> str:
        return f"{self.upload_prefix(photo_id)}:{chunk_index}"

    def meta_key(self, photo_id: str) -> str:
        return f"{self.upload_prefix(photo_id)}:{META_SUFFIX}"

    def _scan_pattern(self, photo_id: str) -> str:
        return _GLOB_CHARS.sub(r"\\\1", self.upload_prefix(photo_id)) + ":*"

    async def put_chunk(self, photo_id: str, chunk_index: int, payload: str, ttl: Optional[int] = None) -> None:
        try:
            await self.__redis.set(self.chunk_key(photo_id, chunk_index), payload, ex=ttl or self.ttl)
        except RedisError as e:
            raise StoreUnavailable(f"Redis Error: {str(e)}") from e

    async def put_metadata(self, photo_id: str, metadata: UploadMetadata, ttl: Optional[int] = None) -> None:
        try:
            await self.__redis.set(
                self.meta_key(photo_id),
                metadata.model_dump_json(by_alias=True),
                ex=ttl or self.ttl,
            )
        except RedisError as e:
            raise StoreUnavailable(f"Redis Error: {str(e)}") from e

    async def get_metadata(self, photo_id: str) -> Optional[UploadMetadata]:
        try:
            raw = await self.__redis.get(self.meta_key(photo_id))
        except RedisError as e:
            raise StoreUnavailable(f"Redis Error: {str(e)}") from e
        if raw is None:
            return None
        return UploadMetadata.model_validate_json(raw)

    async def _scan_keys(self, photo_id: str) -> List[str]:
        try:
            return [key async for key in self.__redis.scan_iter(match=self._scan_pattern(photo_id))]
        except RedisError as e:
            raise StoreUnavailable(f"Redis Error: {str(e)}") from e

    async def list_upload_keys(self, photo_id: str) -> List[str]:
        """Chunk keys plus the metadata key of a single upload."""
        prefix = self.upload_prefix(photo_id) + ":"
        keys = await self._scan_keys(photo_id)
        # ids like "p1:2" share the "p1:" prefix, so only keep direct children
        return [k for k in keys if k[len(prefix):].isdigit() or k[len(prefix):] == META_SUFFIX]

    async def list_chunk_keys(self, photo_id: str) -> List[str]:
        prefix = self.upload_prefix(photo_id) + ":"
        keys = await self._scan_keys(photo_id)
        chunk_keys = [k for k in keys if k[len(prefix):].isdigit()]
        debug_log.debug(f"{photo_id}: {len(chunk_keys)} chunk keys of {len(keys)} scanned")
        return chunk_keys

    async def count_chunks(self, photo_id: str) -> int:
        return len(await self.list_chunk_keys(photo_id))

    async def get_chunk(self, photo_id: str, chunk_index: int) -> Optional[str]:
        try:
            return await self.__redis.get(self.chunk_key(photo_id, chunk_index))
        except RedisError as e:
            raise StoreUnavailable(f"Redis Error: {str(e)}") from e

    async def delete_keys(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        if not keys:
            return 0
        try:
            # DEL ignores keys that already expired
            return await self.__redis.delete(*keys)
        except RedisError as e:
            raise StoreUnavailable(f"Redis Error: {str(e)}") from e

    async def claim_completion(self, photo_id: str) -> bool:
        """
        Delete the metadata key and report whether this call removed it.

        Used as a completion barrier: of several submissions that observe a
        complete upload, only the one whose delete succeeded dispatches it.
        """
        return await self.delete_keys([self.meta_key(photo_id)]) == 1

    async def clear_upload(self, photo_id: str) -> int:
        return await self.delete_keys(await self.list_upload_keys(photo_id))

    async def close(self) -> None:
        await self.__redis.aclose()
