from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from core.storage import GalleryRepository, get_repository
from crud.upload_crud import process_upload
from schemas.upload_schema import UploadFields, UploadResponse


router = APIRouter(prefix="/api/upload", tags=["Upload"])


@router.post("", response_model=UploadResponse, status_code=201)
def upload_live_photo(
    photo: Optional[UploadFile] = File(None),
    video: Optional[UploadFile] = File(None),
    id: Optional[str] = Form(None),
    creation_date: Optional[str] = Form(None),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    gallery_id: Optional[str] = Form(None),
    gallery_name: Optional[str] = Form(None),
    gallery_delete_password: Optional[str] = Form(None),
    gallery_view_password: Optional[str] = Form(None),
    repo: GalleryRepository = Depends(get_repository),
):
    fields = UploadFields(
        id=id,
        creation_date=creation_date,
        latitude=latitude,
        longitude=longitude,
        gallery_id=gallery_id,
        gallery_name=gallery_name,
        gallery_delete_password=gallery_delete_password,
        gallery_view_password=gallery_view_password,
    )
    return process_upload(repo, photo, video, fields)
