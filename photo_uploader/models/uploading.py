from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Literal, Optional


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UploadPhotoRequest(_CamelModel):
    photo: str  # base64 encoded chunk
    chunk_index: int = Field(alias="chunkIndex", ge=0)
    total_chunks: int = Field(alias="totalChunks", ge=1)
    photo_id: str = Field(alias="photoId", min_length=1)
    directory: str
    extension: str

    @model_validator(mode="after")
    def check_chunk_index(self):
        if self.chunk_index >= self.total_chunks:
            raise ValueError(
                f"chunkIndex {self.chunk_index} is outside [0, {self.total_chunks})"
            )
        return self


class UploadMetadata(_CamelModel):
    total_chunks: int = Field(alias="totalChunks")
    photo_id: str = Field(alias="photoId")
    directory: str


class UploadStatus(_CamelModel):
    status: Literal["partial", "complete"]
    url: Optional[str] = None
    received_chunks: int = Field(alias="receivedChunks")
    total_chunks: int = Field(alias="totalChunks")

    @classmethod
    def partial(cls, received_chunks: int, total_chunks: int) -> "UploadStatus":
        return cls(status="partial", url=None, received_chunks=received_chunks, total_chunks=total_chunks)

    @classmethod
    def complete(cls, url: str, total_chunks: int) -> "UploadStatus":
        return cls(status="complete", url=url, received_chunks=total_chunks, total_chunks=total_chunks)


class UploadPhotoJobPayload(_CamelModel):
    file_path: str = Field(alias="filePath")
    base64_data: str = Field(alias="base64Data")
