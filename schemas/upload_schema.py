from pydantic import BaseModel, Field


class UploadFields(BaseModel):
    """Optional multipart form fields sent alongside the photo and video."""

    id: str | None = None
    creation_date: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    gallery_id: str | None = None
    gallery_name: str | None = None
    gallery_delete_password: str | None = None
    gallery_view_password: str | None = None


class UploadedFiles(BaseModel):
    photo: str
    video: str
    metadata: str


class UploadResponse(BaseModel):
    success: bool = True
    id: str
    gallery_id: str = Field(alias="galleryId")
    files: UploadedFiles

    model_config = {"populate_by_name": True}
