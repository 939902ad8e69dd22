import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from photo_uploader.config.config import Settings, settings as default_settings
from photo_uploader.config.logging_config import setup_logging
from photo_uploader.controllers.upload_controller import UploadController
from photo_uploader.middleware.middleware import MaxContentLengthMiddleware
from photo_uploader.routes.upload_photo_route import route as upload_route
from photo_uploader.uploader import create_persistence_worker, create_photo_uploader
from photo_uploader.utils.persistence_worker import PersistenceWorker


info_log = logging.getLogger("info_logger")


def create_app(
    settings: Settings = default_settings,
    uploader: UploadController | None = None,
    worker: PersistenceWorker | None = None,
) -> FastAPI:
    """
    Build the API. Storage configuration is checked here, so a misconfigured
    deployment fails before it accepts a single chunk.

    Run with ``uvicorn --factory photo_uploader.server:create_app``.
    """
    setup_logging(settings.LOG_LEVEL)

    if uploader is None:
        uploader = create_photo_uploader(settings)
    if worker is None and settings.START_WORKER:
        worker = create_persistence_worker(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if worker is not None:
            worker.start()
        yield
        if worker is not None:
            await worker.close()
        await uploader.close()
        info_log.info("Upload API shut down")

    app = FastAPI(
        title="chunked photo uploader",
        description="Assembles base64 photo chunks and queues the finished photo for object storage",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.uploader = uploader
    app.state.worker = worker

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(MaxContentLengthMiddleware, max_content_length=settings.MAX_CONTENT_LENGTH)

    @app.get("/health")
    def get_health():
        return {"message": "backend running"}

    app.include_router(upload_route)

    return app
