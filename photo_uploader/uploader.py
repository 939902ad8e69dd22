"""
Wiring for the uploader: the chunk store on the Redis connection, a bullmq
queue for finished photos, a completion dispatcher and the persistence worker.
"""
from bullmq import Queue

from photo_uploader.clients.chunk_store import ChunkStore
from photo_uploader.clients.redis_client import RedisClient, redis_connection_opts
from photo_uploader.clients.storage_client import StorageClient
from photo_uploader.config.config import Settings, settings as default_settings
from photo_uploader.controllers.upload_controller import UploadController
from photo_uploader.utils.completion_dispatcher import CompletionDispatcher
from photo_uploader.utils.exceptions import ConfigurationError
from photo_uploader.utils.persistence_worker import PersistenceWorker


def check_storage_config(settings: Settings) -> None:
    if not settings.STORAGE_ENDPOINT or not settings.STORAGE_BUCKET_NAME:
        raise ConfigurationError("Storage configuration is required")


def create_photo_uploader(
    settings: Settings = default_settings,
    redis_client=None,
    queue=None,
    logger=None,
) -> UploadController:
    check_storage_config(settings)
    redis_client = redis_client or RedisClient(settings).client
    queue = queue or Queue(settings.QUEUE_NAME, {"connection": redis_connection_opts(settings)})

    store = ChunkStore(redis_client, key_prefix=settings.CHUNK_KEY_PREFIX, ttl=settings.CHUNK_TTL)
    dispatcher = CompletionDispatcher(
        store,
        queue,
        storage_endpoint=settings.STORAGE_ENDPOINT,
        bucket_name=settings.STORAGE_BUCKET_NAME,
        job_name=settings.JOB_NAME,
        job_attempts=settings.JOB_ATTEMPTS,
        completion_barrier=settings.COMPLETION_BARRIER,
        logger=logger,
    )
    return UploadController(store, dispatcher, chunk_ttl=settings.CHUNK_TTL)


def create_persistence_worker(settings: Settings = default_settings, storage=None, logger=None) -> PersistenceWorker:
    check_storage_config(settings)
    storage = storage or StorageClient(settings)
    return PersistenceWorker(
        settings.QUEUE_NAME,
        storage,
        connection=redis_connection_opts(settings),
        concurrency=settings.WORKER_CONCURRENCY,
        logger=logger,
    )
