import os
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from core.errors import AuthRequired, Forbidden
from core.storage import GalleryRepository, get_repository
from crud.asset_crud import list_galleries, list_photos
from models.asset import format_file_size, parse_iso


router = APIRouter(prefix="/gallery", tags=["Pages"])

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")
templates = Jinja2Templates(directory=TEMPLATES_DIR)
templates.env.filters["filesize"] = format_file_size
templates.env.filters["datetime"] = lambda value: parse_iso(value).strftime("%Y-%m-%d %H:%M")


@router.get("", response_class=HTMLResponse)
def gallery_index(request: Request, repo: GalleryRepository = Depends(get_repository)):
    galleries = list_galleries(repo)
    return templates.TemplateResponse(request, "index.html", {"galleries": galleries})


@router.get("/{gallery_id}", response_class=HTMLResponse)
def gallery_page(
    request: Request,
    gallery_id: str,
    p: Optional[str] = None,
    repo: GalleryRepository = Depends(get_repository),
):
    try:
        photos = list_photos(repo, gallery_id=gallery_id, password=p)
    except (AuthRequired, Forbidden) as exc:
        return templates.TemplateResponse(
            request,
            "password.html",
            {"gallery_id": gallery_id, "error": exc.message if p else None},
            status_code=exc.status_code,
        )
    policy = repo.gallery_policy(gallery_id)
    name = policy.name if policy else gallery_id
    return templates.TemplateResponse(
        request,
        "gallery.html",
        {"gallery_id": gallery_id, "gallery_name": name, "photos": photos},
    )
