import os
import uuid
from typing import Optional, Protocol, BinaryIO

from core.config import settings, logger
from core.errors import ConversionFailure, UnsupportedMediaType, ValidationError
from core.imaging import convert_heic_to_jpeg, is_heic
from core.storage import GalleryRepository, check_path_component, discard
from models.asset import AssetRecord, GalleryPolicy, format_file_size, utc_now_iso
from schemas.upload_schema import UploadedFiles, UploadFields, UploadResponse

DEFAULT_GALLERY_ID = "default"
DEFAULT_GALLERY_NAME = "Default Gallery"

PHOTO_TYPES = {
    "image/heic": ".heic",
    "image/heif": ".heif",
    "image/jpeg": ".jpg",
    "image/png": ".png",
}
VIDEO_TYPES = {
    "video/quicktime": ".mov",
    "video/mp4": ".mp4",
}


class IncomingFile(Protocol):
    filename: Optional[str]
    content_type: Optional[str]
    file: BinaryIO


def _extension(upload: IncomingFile, allowed: dict[str, str]) -> str:
    content_type = (upload.content_type or "").lower()
    if content_type not in allowed:
        raise UnsupportedMediaType(f"Invalid file type: {upload.content_type}")
    ext = os.path.splitext(upload.filename or "")[1]
    return ext or allowed[content_type]


def _parse_coordinate(value: Optional[str], name: str) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}: {value!r}")


def _resolve_policy(repo: GalleryRepository, gallery_id: str, fields: UploadFields) -> GalleryPolicy:
    requested = GalleryPolicy(
        name=fields.gallery_name or DEFAULT_GALLERY_NAME,
        delete_password=fields.gallery_delete_password or None,
        view_password=fields.gallery_view_password or None,
    )
    existing = repo.gallery_policy(gallery_id)
    if existing is None:
        return requested
    # Every record in a gallery carries the same name and passwords
    if existing != requested:
        logger.warning(f"Upload to existing gallery {gallery_id}: keeping stored name and passwords")
    return existing


def process_upload(
    repo: GalleryRepository,
    photo: Optional[IncomingFile],
    video: Optional[IncomingFile],
    fields: UploadFields,
    max_bytes: Optional[int] = None,
) -> UploadResponse:
    """Validate and persist one photo+video pair, then write its metadata record."""
    if photo is None or video is None:
        raise ValidationError("Both photo and video files are required")

    photo_ext = _extension(photo, PHOTO_TYPES)
    video_ext = _extension(video, VIDEO_TYPES)

    gallery_id = check_path_component(fields.gallery_id or DEFAULT_GALLERY_ID, "gallery id")
    record_id = fields.id or str(uuid.uuid4())
    asset_key = check_path_component(record_id[:8], "asset id")
    latitude = _parse_coordinate(fields.latitude, "latitude")
    longitude = _parse_coordinate(fields.longitude, "longitude")
    policy = _resolve_policy(repo, gallery_id, fields)
    limit = max_bytes if max_bytes is not None else settings.MAX_FILE_SIZE

    logger.info(f"Processing upload for gallery: {gallery_id} ({policy.name})")

    staged_photo = staged_video = None
    try:
        staged_photo, photo_size = repo.stage_upload(photo.file, photo_ext, limit)
        staged_video, video_size = repo.stage_upload(video.file, video_ext, limit)

        photo_filename = f"{asset_key}_photo{photo_ext}"
        photo_path = repo.store_media(gallery_id, staged_photo, photo_filename)
        staged_photo = None

        if is_heic(photo_filename):
            try:
                photo_path = convert_heic_to_jpeg(photo_path, settings.HEIC_JPEG_QUALITY)
                photo_filename = os.path.basename(photo_path)
                photo_size = os.path.getsize(photo_path)
                logger.info(f"Converted HEIC to JPEG: {photo_filename}")
            except ConversionFailure as exc:
                logger.error(f"{exc}; keeping original")

        video_filename = f"{asset_key}_video{video_ext}"
        repo.store_media(gallery_id, staged_video, video_filename)
        staged_video = None
    finally:
        discard(staged_photo)
        discard(staged_video)

    record = AssetRecord(
        id=record_id,
        photo_file=photo_filename,
        video_file=video_filename,
        photo_size=photo_size,
        video_size=video_size,
        creation_date=fields.creation_date or utc_now_iso(),
        upload_date=utc_now_iso(),
        latitude=latitude,
        longitude=longitude,
        gallery_id=gallery_id,
        gallery_name=policy.name,
        gallery_delete_password=policy.delete_password,
        gallery_view_password=policy.view_password,
    )
    repo.save_record(record)

    logger.info(f"Received Live Photo: {record.id} -> Gallery: {policy.name} ({gallery_id})")
    logger.info(f"  Photo: {photo_filename} ({format_file_size(photo_size)})")
    logger.info(f"  Video: {video_filename} ({format_file_size(video_size)})")

    return UploadResponse(
        id=record.id,
        gallery_id=gallery_id,
        files=UploadedFiles(
            photo=repo.file_url(gallery_id, photo_filename),
            video=repo.file_url(gallery_id, video_filename),
            metadata=repo.file_url(gallery_id, record.metadata_file),
        ),
    )
