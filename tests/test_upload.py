import io
import json
import os

import pytest

from core.errors import FileTooLarge
from crud.upload_crud import process_upload
from schemas.upload_schema import UploadFields


def _gallery_files(repo, gallery_id):
    return sorted(os.listdir(os.path.join(repo.root, gallery_id)))


def test_upload_without_fields_uses_default_gallery(client, repo, upload):
    res = upload()
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["galleryId"] == "default"
    key = body["id"][:8]
    assert body["files"] == {
        "photo": f"/files/default/{key}_photo.jpg",
        "video": f"/files/default/{key}_video.mov",
        "metadata": f"/files/default/{key}_metadata.json",
    }
    assert _gallery_files(repo, "default") == [
        f"{key}_metadata.json",
        f"{key}_photo.jpg",
        f"{key}_video.mov",
    ]

    with open(os.path.join(repo.root, "default", f"{key}_metadata.json")) as fh:
        stored = json.load(fh)
    assert stored["galleryName"] == "Default Gallery"
    assert "latitude" not in stored

    fetched = client.get(f"/api/photos/{body['id']}").json()
    for field, value in stored.items():
        assert fetched[field] == value
    assert fetched["photoUrl"] == body["files"]["photo"]
    assert fetched["videoUrl"] == body["files"]["video"]


def test_client_id_is_truncated_for_filenames(repo, upload):
    body = upload(id="ABCDEFGH-1234-5678").json()
    assert body["id"] == "ABCDEFGH-1234-5678"
    assert body["files"]["photo"] == "/files/default/ABCDEFGH_photo.jpg"
    assert "ABCDEFGH_metadata.json" in _gallery_files(repo, "default")


def test_record_sizes_and_optional_fields(repo, upload, png_photo):
    body = upload(
        photo=png_photo,
        id="deadbeef",
        creation_date="2024:05:01 10:11:12",
        latitude="52.52",
        longitude="13.405",
        gallery_id="trip",
        gallery_name="Berlin Trip",
    ).json()
    record = repo.find_asset(body["id"])
    assert record.photo_file == "deadbeef_photo.png"
    assert record.photo_size == len(png_photo[1])
    assert record.video_size == os.path.getsize(os.path.join(repo.root, "trip", "deadbeef_video.mov"))
    assert record.creation_date == "2024:05:01 10:11:12"
    assert record.latitude == 52.52
    assert record.longitude == 13.405
    assert record.gallery_name == "Berlin Trip"
    assert record.upload_date.endswith("Z")


def test_heic_photo_is_stored_as_jpeg(repo, upload, heic_photo):
    body = upload(photo=heic_photo, id="heic0001").json()
    files = _gallery_files(repo, "default")
    assert "heic0001_photo.jpg" in files
    assert not any(f.lower().endswith(".heic") for f in files)
    record = repo.find_asset("heic0001")
    assert record.photo_file == "heic0001_photo.jpg"
    assert record.photo_size == os.path.getsize(os.path.join(repo.root, "default", "heic0001_photo.jpg"))
    assert body["files"]["photo"].endswith("_photo.jpg")


def test_failed_heic_conversion_keeps_original(repo, upload):
    res = upload(photo=("broken.heic", b"definitely not an image", "image/heic"), id="badheic1")
    assert res.status_code == 201
    record = repo.find_asset("badheic1")
    assert record.photo_file == "badheic1_photo.heic"
    assert os.path.exists(os.path.join(repo.root, "default", "badheic1_photo.heic"))
    assert not os.path.exists(os.path.join(repo.root, "default", "badheic1_photo.jpg"))


def test_missing_video_is_rejected(client, repo):
    res = client.post("/api/upload", files={"photo": ("a.jpg", b"jpeg", "image/jpeg")})
    assert res.status_code == 400
    assert res.json()["error"] == "Both photo and video files are required"
    assert not os.path.exists(os.path.join(repo.root, "default"))


def test_unsupported_content_type_writes_nothing(repo, upload):
    res = upload(video=("clip.avi", b"RIFF", "video/x-msvideo"))
    assert res.status_code == 415
    assert "video/x-msvideo" in res.json()["error"]
    assert not os.path.exists(os.path.join(repo.root, "default"))


@pytest.mark.parametrize("gallery_id", ["../escape", ".temp", "a/b"])
def test_unsafe_gallery_ids_are_rejected(repo, upload, gallery_id):
    res = upload(gallery_id=gallery_id)
    assert res.status_code == 400
    assert os.listdir(repo.root) == []


def test_invalid_latitude_is_rejected(upload):
    res = upload(latitude="north")
    assert res.status_code == 400


def test_extension_falls_back_to_content_type(repo, upload):
    body = upload(photo=("blob", b"png-bytes", "image/png"), video=("blob", b"mp4", "video/mp4")).json()
    assert body["files"]["photo"].endswith("_photo.png")
    assert body["files"]["video"].endswith("_video.mp4")


class _Upload:
    def __init__(self, filename, content_type, data):
        self.filename = filename
        self.content_type = content_type
        self.file = io.BytesIO(data)


def test_oversize_file_is_rejected_and_staging_cleaned(repo):
    photo = _Upload("a.jpg", "image/jpeg", b"x" * 64)
    video = _Upload("a.mov", "video/quicktime", b"y" * 8)
    with pytest.raises(FileTooLarge):
        process_upload(repo, photo, video, UploadFields(), max_bytes=32)
    assert os.listdir(repo.temp_dir) == []
    assert repo.list_assets() == []


def test_existing_gallery_keeps_its_name_and_passwords(repo, upload):
    upload(id="first001", gallery_id="family", gallery_name="Family", gallery_delete_password="del", gallery_view_password="view")
    upload(id="second01", gallery_id="family", gallery_name="Renamed", gallery_delete_password="other")

    records = repo.list_assets("family")
    assert len(records) == 2
    assert {r.gallery_name for r in records} == {"Family"}
    assert {r.gallery_delete_password for r in records} == {"del"}
    assert {r.gallery_view_password for r in records} == {"view"}


def test_returned_urls_serve_the_stored_files(client, upload):
    photo = ("IMG_0010.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")
    video = ("IMG_0010.mov", b"mov-bytes", "video/quicktime")
    body = upload(photo=photo, video=video, id="serve001", gallery_delete_password="pw").json()

    assert client.get(body["files"]["photo"]).content == photo[1]
    assert client.get(body["files"]["video"]).content == video[1]
    metadata = client.get(body["files"]["metadata"]).json()
    assert metadata["id"] == "serve001"

    fetched = client.get("/api/photos/serve001").json()
    assert client.get(fetched["photoUrl"]).content == photo[1]
    assert client.get(fetched["videoUrl"]).content == video[1]


def test_heic_url_serves_converted_jpeg(client, repo, upload, heic_photo):
    body = upload(photo=heic_photo, id="heicurl1").json()
    res = client.get(body["files"]["photo"])
    assert res.status_code == 200
    assert res.content[:2] == b"\xff\xd8"
    assert len(res.content) == repo.find_asset("heicurl1").photo_size
