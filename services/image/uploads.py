"""
Upload staging and file cleanup for meal photos.

Uploads are streamed to a scratch file (enforcing the size limit while
copying), read back for processing, and the scratch file is removed on every
exit path. Cleanup never fails a request.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from fastapi import UploadFile

from app.exceptions import (
    PayloadTooLarge,
    UnknownDimensionsError,
    UnsupportedMediaType,
)
from services.image.storage_policy import ImageStoragePolicy, StoredImage

logger = logging.getLogger("meallog.image.uploads")

CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
MIB = 1024 * 1024


@dataclass(frozen=True)
class StagedUpload:
    path: Path
    filename: Optional[str]
    content_type: str
    size: int

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def safe_delete_file(file_path: Union[str, Path, None]) -> bool:
    """
    Delete a file if it exists.

    Returns True when a file was removed. Missing files and OS errors are
    logged and reported as False, never raised.
    """
    if not file_path:
        return False
    path = Path(file_path)
    try:
        path.unlink()
    except FileNotFoundError:
        logger.info("File not found (already deleted): %s", path)
        return False
    except OSError as exc:
        logger.warning("Error deleting file %s: %s", path, exc)
        return False
    logger.info("Successfully deleted file: %s", path)
    return True


def legacy_photo_path(photo_url: Optional[str], legacy_dir: Union[str, Path]) -> Optional[Path]:
    """Map a legacy ``/uploads/<name>`` photo URL onto the upload directory"""
    if not photo_url:
        return None
    name = Path(photo_url).name
    if not name or name in (".", ".."):
        return None
    return Path(legacy_dir) / name


def delete_legacy_photo(photo_url: Optional[str], legacy_dir: Union[str, Path]) -> bool:
    return safe_delete_file(legacy_photo_path(photo_url, legacy_dir))


def describe_limit(max_bytes: int) -> str:
    """Human form of an upload limit: whole mebibytes as MB, anything else in bytes"""
    if max_bytes >= MIB and max_bytes % MIB == 0:
        return f"{max_bytes // MIB} MB"
    return f"{max_bytes} bytes"


def ensure_image_content_type(upload: UploadFile) -> str:
    content_type = (upload.content_type or "").lower()
    if not content_type.startswith("image/"):
        raise UnsupportedMediaType(details={"content_type": content_type or None})
    return content_type


@contextmanager
def stage_upload(
    upload: UploadFile,
    directory: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> Iterator[StagedUpload]:
    """
    Copy an upload into a scratch file and yield it.

    Raises:
        UnsupportedMediaType: MIME type is not image/* (checked before any disk write)
        PayloadTooLarge: body exceeds ``max_bytes``
    """
    content_type = ensure_image_content_type(upload)

    scratch_dir = Path(directory or tempfile.gettempdir())
    scratch_dir.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix="upload-", dir=scratch_dir)
    path = Path(name)

    try:
        size = 0
        with os.fdopen(fd, "wb") as out:
            for chunk in iter(lambda: upload.file.read(CHUNK_SIZE), b""):
                size += len(chunk)
                if size > max_bytes:
                    raise PayloadTooLarge(
                        f"File exceeds the {describe_limit(max_bytes)} limit",
                        details={"limit_bytes": max_bytes},
                    )
                out.write(chunk)
        staged = StagedUpload(
            path=path, filename=upload.filename, content_type=content_type, size=size
        )
        logger.debug("upload_staged path=%s size=%d", staged.path, staged.size)
        yield staged
    finally:
        safe_delete_file(path)


def ingest_upload(
    upload: UploadFile,
    policy: ImageStoragePolicy,
    directory: Optional[str] = None,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> StoredImage:
    """
    Validate an uploaded photo and turn it into its stored representation.

    Content that is not an image is rejected before the storage policy runs.
    """
    with stage_upload(upload, directory, max_bytes) as staged:
        image_bytes = staged.read_bytes()
        try:
            policy.codec.read_dimensions(image_bytes)
        except UnknownDimensionsError as exc:
            raise UnsupportedMediaType(
                "Uploaded file is not a valid image",
                details={"filename": staged.filename, "content_type": staged.content_type},
            ) from exc
        stored = policy.prepare(image_bytes)
        logger.info(
            "upload_ingested filename=%s content_type=%s bytes=%d encoding=%s",
            staged.filename,
            staged.content_type,
            staged.size,
            stored.encoding.value,
        )
        return stored
