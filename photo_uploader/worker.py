import asyncio
import logging

from photo_uploader.config.config import settings
from photo_uploader.config.logging_config import setup_logging
from photo_uploader.uploader import create_persistence_worker


async def main():
    setup_logging(settings.LOG_LEVEL)
    worker = create_persistence_worker(settings)
    logging.getLogger("info_logger").info(
        f"Persistence worker consuming queue '{settings.QUEUE_NAME}' with concurrency {settings.WORKER_CONCURRENCY}"
    )
    worker.start(autorun=False)
    try:
        await worker.run()
    finally:
        await worker.close()


if __name__ == "__main__":
    asyncio.run(main())
