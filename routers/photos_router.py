from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.storage import GalleryRepository, get_repository
from crud.asset_crud import delete_photo, get_photo, list_galleries, list_photos
from schemas.asset_schema import AssetResponse, DeleteRequest, DeleteResponse, PhotoListResponse
from schemas.gallery_schema import GalleryListResponse, GalleryResponse


router = APIRouter(prefix="/api/photos", tags=["Photos"])


@router.get("/galleries", response_model=GalleryListResponse)
def list_all_galleries(repo: GalleryRepository = Depends(get_repository)):
    galleries = [GalleryResponse.from_info(g) for g in list_galleries(repo)]
    return GalleryListResponse(galleries=galleries, count=len(galleries))


@router.get("", response_model=PhotoListResponse, response_model_exclude_none=True)
def list_all(
    gallery: Optional[str] = None,
    p: Optional[str] = Query(None, description="Gallery view password"),
    repo: GalleryRepository = Depends(get_repository),
):
    photos = [AssetResponse.from_record(r) for r in list_photos(repo, gallery_id=gallery, password=p)]
    return PhotoListResponse(photos=photos, count=len(photos))


@router.get("/{photo_id}", response_model=AssetResponse, response_model_exclude_none=True)
def read_one(photo_id: str, repo: GalleryRepository = Depends(get_repository)):
    return AssetResponse.from_record(get_photo(repo, photo_id))


@router.delete("/{photo_id}", response_model=DeleteResponse)
def delete(
    photo_id: str,
    body: Optional[DeleteRequest] = None,
    repo: GalleryRepository = Depends(get_repository),
):
    deleted = delete_photo(repo, photo_id, body.password if body else None)
    return DeleteResponse(deleted=deleted)
