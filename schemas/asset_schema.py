from pydantic import BaseModel, Field

from models.asset import AssetRecord


class AssetResponse(BaseModel):
    """Stored asset record plus the derived media URLs."""

    id: str
    photo_file: str = Field(alias="photoFile")
    video_file: str = Field(alias="videoFile")
    photo_size: int = Field(alias="photoSize")
    video_size: int = Field(alias="videoSize")
    creation_date: str = Field(alias="creationDate")
    upload_date: str = Field(alias="uploadDate")
    latitude: float | None = None
    longitude: float | None = None
    gallery_id: str | None = Field(default=None, alias="galleryId")
    gallery_name: str | None = Field(default=None, alias="galleryName")
    gallery_delete_password: str | None = Field(default=None, alias="galleryDeletePassword")
    gallery_view_password: str | None = Field(default=None, alias="galleryViewPassword")
    photo_url: str | None = Field(default=None, alias="photoUrl")
    video_url: str | None = Field(default=None, alias="videoUrl")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, record: AssetRecord) -> "AssetResponse":
        data = record.model_dump()
        # Derived URLs are excluded from the record's own dump
        data.update(photo_url=record.photo_url, video_url=record.video_url)
        return cls.model_validate(data)


class PhotoListResponse(BaseModel):
    photos: list[AssetResponse]
    count: int


class DeleteRequest(BaseModel):
    password: str | None = None


class DeleteResponse(BaseModel):
    success: bool = True
    deleted: str
