from pydantic import BaseModel, Field

from models.asset import GalleryInfo


class GalleryResponse(BaseModel):
    id: str
    name: str
    photo_count: int = Field(alias="photoCount")
    last_updated: str = Field(alias="lastUpdated")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_info(cls, info: GalleryInfo) -> "GalleryResponse":
        return cls.model_validate(info.model_dump())


class GalleryListResponse(BaseModel):
    galleries: list[GalleryResponse]
    count: int
