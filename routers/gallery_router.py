from typing import Optional

from fastapi import APIRouter, Depends

from core.storage import GalleryRepository, get_repository
from crud.asset_crud import delete_gallery
from schemas.asset_schema import DeleteRequest, DeleteResponse


router = APIRouter(prefix="/api/gallery", tags=["Galleries"])


@router.delete("/{gallery_id}", response_model=DeleteResponse)
def delete(
    gallery_id: str,
    body: Optional[DeleteRequest] = None,
    repo: GalleryRepository = Depends(get_repository),
):
    deleted = delete_gallery(repo, gallery_id, body.password if body else None)
    return DeleteResponse(deleted=deleted)
