import io
import os
import shutil
import tempfile

import pytest
from PIL import Image

_SESSION_ROOT = None


def pytest_configure(config):
    # The app reads UPLOAD_DIR once at import and mounts it under /files,
    # so every test shares this root; it is emptied before each test.
    global _SESSION_ROOT
    _SESSION_ROOT = tempfile.mkdtemp(prefix="livephoto-")
    os.environ["UPLOAD_DIR"] = _SESSION_ROOT


def pytest_unconfigure(config):
    if _SESSION_ROOT:
        shutil.rmtree(_SESSION_ROOT, ignore_errors=True)


@pytest.fixture
def repo():
    from core.storage import get_repository

    repository = get_repository()
    repository.ensure_root()
    for name in os.listdir(repository.root):
        path = os.path.join(repository.root, name)
        if os.path.isdir(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    return repository


@pytest.fixture
def client(repo):
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as c:
        yield c


def image_bytes(fmt: str = "JPEG", size=(64, 48)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 60, 30)).save(buf, format=fmt)
    return buf.getvalue()


def heic_bytes(size=(64, 64)) -> bytes:
    import pillow_heif

    buf = io.BytesIO()
    pillow_heif.from_pillow(Image.new("RGB", size, (20, 120, 220))).save(buf, quality=80)
    return buf.getvalue()


VIDEO_BYTES = b"\x00\x00\x00\x18ftypqt  " + b"\x00" * 256


@pytest.fixture
def upload(client):
    """Post a live photo; returns the response."""

    def _upload(photo=None, video=None, **fields):
        files = {
            "photo": photo or ("IMG_0001.jpg", image_bytes(), "image/jpeg"),
            "video": video or ("IMG_0001.mov", VIDEO_BYTES, "video/quicktime"),
        }
        data = {k: v for k, v in fields.items() if v is not None}
        return client.post("/api/upload", files=files, data=data)

    return _upload


@pytest.fixture
def png_photo():
    return ("IMG_0002.png", image_bytes("PNG"), "image/png")


@pytest.fixture
def heic_photo():
    return ("IMG_0003.HEIC", heic_bytes(), "image/heic")


@pytest.fixture
def make_record(repo):
    """Write a record plus placeholder media straight into the store."""
    from models.asset import AssetRecord

    def _make(record_id, gallery_id="default", upload_date="2026-01-01T00:00:00.000Z", **policy):
        gallery_path = os.path.join(repo.root, gallery_id)
        os.makedirs(gallery_path, exist_ok=True)
        key = record_id[:8]
        for name in (f"{key}_photo.jpg", f"{key}_video.mov"):
            with open(os.path.join(gallery_path, name), "wb") as fh:
                fh.write(b"media")
        record = AssetRecord(
            id=record_id,
            photo_file=f"{key}_photo.jpg",
            video_file=f"{key}_video.mov",
            photo_size=5,
            video_size=5,
            creation_date=upload_date,
            upload_date=upload_date,
            gallery_id=gallery_id,
            gallery_name=policy.get("name", gallery_id.title()),
            gallery_delete_password=policy.get("delete_password"),
            gallery_view_password=policy.get("view_password"),
        )
        repo.save_record(record)
        return record

    return _make


@pytest.fixture
def delete(client):
    def _delete(url, password=None):
        body = {"password": password} if password is not None else {}
        return client.request("DELETE", url, json=body)

    return _delete
