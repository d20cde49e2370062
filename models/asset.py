from datetime import datetime, timezone

from pydantic import BaseModel, Field

METADATA_SUFFIX = "_metadata.json"
EPOCH_ISO = "1970-01-01T00:00:00.000Z"


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with milliseconds and a trailing Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str | None) -> datetime:
    # Unparsable dates sort as the epoch
    if not value:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class AssetRecord(BaseModel):
    """One uploaded photo+video pair, stored as ``<key>_metadata.json``.

    Gallery name and passwords are denormalized into every record of a gallery.
    """

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

    # Derived on read, never persisted
    photo_url: str | None = Field(default=None, alias="photoUrl", exclude=True)
    video_url: str | None = Field(default=None, alias="videoUrl", exclude=True)

    model_config = {"populate_by_name": True}

    @property
    def key(self) -> str:
        return self.id[:8]

    @property
    def metadata_file(self) -> str:
        return f"{self.key}{METADATA_SUFFIX}"

    @property
    def uploaded_at(self) -> datetime:
        return parse_iso(self.upload_date)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


class GalleryPolicy(BaseModel):
    """Gallery name and access passwords, reconstructed from one record."""

    name: str
    delete_password: str | None = None
    view_password: str | None = None

    @classmethod
    def from_record(cls, record: AssetRecord, gallery_dir: str) -> "GalleryPolicy":
        return cls(
            name=record.gallery_name or gallery_dir,
            delete_password=record.gallery_delete_password,
            view_password=record.gallery_view_password,
        )


class GalleryInfo(BaseModel):
    id: str
    name: str
    photo_count: int
    last_updated: str = EPOCH_ISO
