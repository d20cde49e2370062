import json
import os
import shutil
import uuid
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator, Optional

from pydantic import ValidationError as RecordValidationError

from core.config import settings, logger
from core.errors import FileTooLarge, InternalError, NotFound, ValidationError
from models.asset import EPOCH_ISO, METADATA_SUFFIX, AssetRecord, GalleryInfo, GalleryPolicy, parse_iso

TEMP_DIR_NAME = ".temp"
CHUNK_SIZE = 1024 * 1024


def check_path_component(value: str, label: str) -> str:
    """Reject anything that is not a single, visible directory entry name."""
    if not value or "/" in value or "\\" in value or value.startswith(".") or "\x00" in value:
        raise ValidationError(f"Invalid {label}: {value!r}")
    return value


class GalleryRepository(ABC):
    """Gallery and asset persistence. Galleries hold assets; there is no gallery record."""

    @abstractmethod
    def ensure_root(self) -> None: ...

    @abstractmethod
    def list_galleries(self) -> list[GalleryInfo]: ...

    @abstractmethod
    def list_assets(self, gallery_id: Optional[str] = None) -> list[AssetRecord]: ...

    @abstractmethod
    def find_asset(self, id_or_prefix: str) -> Optional[AssetRecord]: ...

    @abstractmethod
    def delete_asset(self, id_or_prefix: str) -> AssetRecord: ...

    @abstractmethod
    def delete_gallery(self, gallery_id: str) -> int: ...

    @abstractmethod
    def gallery_policy(self, gallery_id: str) -> Optional[GalleryPolicy]: ...

    @abstractmethod
    def stage_upload(self, stream: BinaryIO, suffix: str, max_bytes: int) -> tuple[str, int]: ...

    @abstractmethod
    def store_media(self, gallery_id: str, staged_path: str, filename: str) -> str: ...

    @abstractmethod
    def save_record(self, record: AssetRecord) -> str: ...

    @abstractmethod
    def file_url(self, gallery_id: str, filename: str) -> str: ...


class FileSystemGalleryRepository(GalleryRepository):
    """Directory-per-gallery store; every call re-scans the filesystem.

    Directory entries are visited in sorted order so "first record found"
    is stable across platforms.
    """

    def __init__(self, root: str, url_path: str = "/files"):
        self.root = os.path.abspath(root)
        self.url_path = url_path.rstrip("/")

    # ---- paths ----

    @property
    def temp_dir(self) -> str:
        return os.path.join(self.root, TEMP_DIR_NAME)

    def gallery_path(self, gallery_id: str) -> str:
        return os.path.join(self.root, check_path_component(gallery_id, "gallery id"))

    def file_url(self, gallery_id: str, filename: str) -> str:
        return f"{self.url_path}/{gallery_id}/{filename}"

    def ensure_root(self) -> None:
        if not os.path.isdir(self.root):
            os.makedirs(self.root, exist_ok=True)
            logger.info(f"Created upload directory: {self.root}")

    # ---- scanning ----

    def _gallery_dirs(self) -> list[str]:
        if not os.path.isdir(self.root):
            return []
        return [
            name
            for name in sorted(os.listdir(self.root))
            if name != TEMP_DIR_NAME and os.path.isdir(os.path.join(self.root, name))
        ]

    def _record_files(self, gallery_dir: str) -> list[str]:
        dir_path = os.path.join(self.root, gallery_dir)
        if not os.path.isdir(dir_path):
            return []
        return [f for f in sorted(os.listdir(dir_path)) if f.endswith(METADATA_SUFFIX)]

    def _read_record(self, gallery_dir: str, filename: str) -> AssetRecord:
        path = os.path.join(self.root, gallery_dir, filename)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
            record = AssetRecord.model_validate(data)
        except (ValueError, RecordValidationError) as exc:
            raise InternalError(f"Unreadable metadata record {gallery_dir}/{filename}: {exc}") from exc
        record.photo_url = self.file_url(gallery_dir, record.photo_file)
        record.video_url = self.file_url(gallery_dir, record.video_file)
        return record

    def _iter_records(self, gallery_dirs: list[str]) -> Iterator[tuple[str, str, AssetRecord]]:
        for gallery_dir in gallery_dirs:
            for filename in self._record_files(gallery_dir):
                try:
                    yield gallery_dir, filename, self._read_record(gallery_dir, filename)
                except FileNotFoundError:
                    # Deleted between listing and reading
                    continue

    def _locate(self, id_or_prefix: str) -> Optional[tuple[str, str, AssetRecord]]:
        if not id_or_prefix:
            return None
        for gallery_dir, filename, record in self._iter_records(self._gallery_dirs()):
            if record.id == id_or_prefix or record.id.startswith(id_or_prefix):
                return gallery_dir, filename, record
        return None

    # ---- read side ----

    def list_galleries(self) -> list[GalleryInfo]:
        galleries: list[GalleryInfo] = []
        for gallery_dir in self._gallery_dirs():
            records = [r for _, _, r in self._iter_records([gallery_dir])]
            name = gallery_dir
            last_updated = EPOCH_ISO
            if records:
                name = records[0].gallery_name or gallery_dir
                latest = max(records, key=lambda r: r.uploaded_at)
                last_updated = latest.upload_date
            galleries.append(
                GalleryInfo(id=gallery_dir, name=name, photo_count=len(records), last_updated=last_updated)
            )
        galleries.sort(key=lambda g: parse_iso(g.last_updated), reverse=True)
        return galleries

    def list_assets(self, gallery_id: Optional[str] = None) -> list[AssetRecord]:
        gallery_dirs = self._gallery_dirs()
        if gallery_id is not None:
            gallery_dirs = [d for d in gallery_dirs if d == gallery_id]
        records = [r for _, _, r in self._iter_records(gallery_dirs)]
        records.sort(key=lambda r: r.uploaded_at, reverse=True)
        return records

    def find_asset(self, id_or_prefix: str) -> Optional[AssetRecord]:
        found = self._locate(id_or_prefix)
        return found[2] if found else None

    def gallery_policy(self, gallery_id: str) -> Optional[GalleryPolicy]:
        if gallery_id not in self._gallery_dirs():
            return None
        for gallery_dir, _, record in self._iter_records([gallery_id]):
            return GalleryPolicy.from_record(record, gallery_dir)
        return None

    # ---- delete side ----

    def delete_asset(self, id_or_prefix: str) -> AssetRecord:
        found = self._locate(id_or_prefix)
        if not found:
            raise NotFound("Photo not found")
        gallery_dir, filename, record = found
        dir_path = os.path.join(self.root, gallery_dir)
        for media in (record.photo_file, record.video_file):
            try:
                os.remove(os.path.join(dir_path, media))
            except FileNotFoundError:
                pass
        try:
            os.remove(os.path.join(dir_path, filename))
        except FileNotFoundError:
            # Lost a race with another delete
            raise NotFound("Photo not found")
        return record

    def delete_gallery(self, gallery_id: str) -> int:
        if gallery_id not in self._gallery_dirs():
            raise NotFound("Gallery not found")
        count = len(self._record_files(gallery_id))
        if count == 0:
            raise NotFound("Gallery not found")
        shutil.rmtree(os.path.join(self.root, gallery_id))
        return count

    # ---- write side ----

    def stage_upload(self, stream: BinaryIO, suffix: str, max_bytes: int) -> tuple[str, int]:
        os.makedirs(self.temp_dir, exist_ok=True)
        path = os.path.join(self.temp_dir, f"{uuid.uuid4()}{suffix}")
        size = 0
        try:
            with open(path, "wb") as out:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > max_bytes:
                        raise FileTooLarge(f"File exceeds the {max_bytes} byte limit")
                    out.write(chunk)
        except Exception:
            discard(path)
            raise
        return path, size

    def store_media(self, gallery_id: str, staged_path: str, filename: str) -> str:
        gallery_path = self.gallery_path(gallery_id)
        os.makedirs(gallery_path, exist_ok=True)
        final_path = os.path.join(gallery_path, check_path_component(filename, "filename"))
        os.replace(staged_path, final_path)
        return final_path

    def save_record(self, record: AssetRecord) -> str:
        gallery_path = self.gallery_path(record.gallery_id or "default")
        os.makedirs(gallery_path, exist_ok=True)
        os.makedirs(self.temp_dir, exist_ok=True)
        tmp_path = os.path.join(self.temp_dir, f"{uuid.uuid4()}{METADATA_SUFFIX}")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            fh.write(record.to_json())
        final_path = os.path.join(gallery_path, check_path_component(record.metadata_file, "asset id"))
        os.replace(tmp_path, final_path)
        return final_path


def discard(path: Optional[str]) -> None:
    if path and os.path.exists(path):
        os.remove(path)


def get_repository() -> GalleryRepository:
    return FileSystemGalleryRepository(settings.UPLOAD_DIR, settings.FILES_URL_PATH)
