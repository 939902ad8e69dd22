from photo_uploader.config.config import Settings, settings as default_settings
import redis.asyncio as redis_async


def redis_connection_opts(settings: Settings = default_settings) -> dict:
    """Connection options in the shape bullmq's ``connection`` option takes."""
    return {
        "host": settings.REDIS_HOST,
        "port": settings.REDIS_PORT,
        "db": settings.REDIS_DB,
    }


class RedisClient:
    def __init__(self, settings: Settings = default_settings) -> None:
        self.__client = redis_async.Redis(decode_responses=True, **redis_connection_opts(settings))

    @property
    def client(self):
        return self.__client
