from fastapi import APIRouter, Depends, HTTPException, Request

from photo_uploader.controllers.upload_controller import UploadController
from photo_uploader.models.messages import SuccessfulMessage
from photo_uploader.models.uploading import UploadPhotoRequest
from photo_uploader.utils.exceptions import MissingChunkAtAssembly, StoreUnavailable


route = APIRouter(tags=["photo_upload_router"])


def get_upload_controller(request: Request) -> UploadController:
    return request.app.state.uploader


@route.post("/upload-image")
async def upload_image(data: UploadPhotoRequest, upload_controller: UploadController = Depends(get_upload_controller)):
    try:
        result = await upload_controller.submit_chunk(data)
    except MissingChunkAtAssembly as e:
        raise HTTPException(
            status_code=409,
            detail=f"Error while assembling photo: {e}"
        )
    except StoreUnavailable as e:
        raise HTTPException(
            status_code=503,
            detail=f"Error while storing chunk: {e}"
        )

    return SuccessfulMessage(
        message="Image uploaded successfully",
        data=result.model_dump(by_alias=True),
    )


@route.get("/upload-image/{photo_id}/status")
async def upload_status(photo_id: str, upload_controller: UploadController = Depends(get_upload_controller)):
    try:
        status = await upload_controller.get_upload_status(photo_id)
    except StoreUnavailable as e:
        raise HTTPException(
            status_code=503,
            detail=f"Error while retrieving upload status: {e}"
        )

    if status is None:
        raise HTTPException(status_code=404, detail=f"No upload in progress for {photo_id}")

    return SuccessfulMessage(
        message="upload status retrieved successfully",
        data=status.model_dump(by_alias=True),
    )
