from typing import Optional

from core.auth import require_delete_access, require_view_access
from core.config import logger
from core.errors import NotFound, ValidationError
from core.storage import GalleryRepository
from models.asset import AssetRecord, GalleryInfo, GalleryPolicy


def list_galleries(repo: GalleryRepository) -> list[GalleryInfo]:
    return repo.list_galleries()


def list_photos(
    repo: GalleryRepository,
    gallery_id: Optional[str] = None,
    password: Optional[str] = None,
) -> list[AssetRecord]:
    """All assets, newest first. Filtering by gallery enforces its view password."""
    if gallery_id:
        require_view_access(repo.gallery_policy(gallery_id), password)
        return repo.list_assets(gallery_id)
    return repo.list_assets()


def get_photo(repo: GalleryRepository, id_or_prefix: str) -> AssetRecord:
    record = repo.find_asset(id_or_prefix)
    if not record:
        raise NotFound("Photo not found")
    return record


def delete_photo(repo: GalleryRepository, id_or_prefix: str, password: Optional[str]) -> str:
    if not password:
        raise ValidationError("Password is required")
    record = get_photo(repo, id_or_prefix)
    # Access is decided by the record itself, not the gallery's first record
    policy = GalleryPolicy.from_record(record, record.gallery_id or "")
    require_delete_access(policy, password, target="Photo")
    deleted = repo.delete_asset(record.id)
    logger.info(f"Deleted photo: {deleted.id} from gallery {deleted.gallery_name}")
    return deleted.id


def delete_gallery(repo: GalleryRepository, gallery_id: str, password: Optional[str]) -> str:
    if not password:
        raise ValidationError("Password is required")
    policy = repo.gallery_policy(gallery_id)
    if policy is None:
        raise NotFound("Gallery not found")
    require_delete_access(policy, password, target="Gallery")
    count = repo.delete_gallery(gallery_id)
    logger.info(f"Deleted gallery: {gallery_id} ({policy.name}), {count} photo(s)")
    return gallery_id
