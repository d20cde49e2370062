from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from core.config import settings, logger
from core.errors import LivePhotoError, ValidationError
from core.storage import get_repository
from models.asset import utc_now_iso
from routers import upload_router, photos_router, gallery_router, page_router

APP_VERSION = "1.2.1"

app = FastAPI(title="LivePhoto Server", version=APP_VERSION)

# Respect X-Forwarded-Proto/Host when behind a proxy (Docker/nginx/etc.)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LivePhotoError)
def livephoto_error_handler(request: Request, exc: LivePhotoError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return livephoto_error_handler(request, ValidationError(f"Invalid request: {problems}"))


@app.exception_handler(OSError)
def filesystem_error_handler(request: Request, exc: OSError):
    logger.exception(f"{request.method} {request.url.path} failed")
    return JSONResponse(status_code=500, content={"error": str(exc)})


app.include_router(upload_router.router)
app.include_router(photos_router.router)
app.include_router(gallery_router.router)
app.include_router(page_router.router)

# Uploaded media, served straight from the gallery directories
get_repository().ensure_root()
app.mount(
    settings.FILES_URL_PATH,
    StaticFiles(directory=settings.UPLOAD_DIR),
    name="files",
)


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": utc_now_iso()}


@app.get("/")
def root():
    return {
        "name": "LivePhoto Server",
        "version": APP_VERSION,
        "endpoints": {
            "upload": "POST /api/upload",
            "photos": "GET /api/photos",
            "photo": "GET /api/photos/:id",
            "galleries": "GET /api/photos/galleries",
            "deletePhoto": "DELETE /api/photos/:id",
            "deleteGallery": "DELETE /api/gallery/:galleryId",
            "gallery": "GET /gallery/:galleryId",
            "health": "GET /health",
            "files": f"GET {settings.FILES_URL_PATH}/:galleryId/:filename",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"LivePhoto Server running on http://{settings.HOST}:{settings.PORT}")
    logger.info(f"Upload directory: {settings.UPLOAD_DIR}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
