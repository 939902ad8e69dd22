from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    CHUNK_TTL: int = 3600
    CHUNK_KEY_PREFIX: str = "photo_chunks"

    QUEUE_NAME: str = "uploads"
    JOB_NAME: str = "upload_photo"
    JOB_ATTEMPTS: int = 2
    WORKER_CONCURRENCY: int = 3
    START_WORKER: bool = True

    STORAGE_ENDPOINT: str = ""
    STORAGE_BUCKET_NAME: str = ""
    STORAGE_ACCESS_KEY: str = ""
    STORAGE_SECRET_KEY: str = ""

    COMPLETION_BARRIER: bool = False

    LOG_LEVEL: str = "INFO"
    ALLOW_ORIGINS: List[str] = ["*"]
    MAX_CONTENT_LENGTH: int = 10 * 1024 * 1024


settings = Settings()
