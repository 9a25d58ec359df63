from __future__ import annotations

import logging
import os
import re
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from fastapi import UploadFile

from worker.app.errors import FileTooLargeError, ValidationError
from worker.app.models import StoredImage

log = logging.getLogger(__name__)

CHUNK_BYTES = 64 * 1024
_EXT_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


def validate_image_upload(upload: Optional[UploadFile]) -> UploadFile:
    if upload is None or not (upload.filename or "").strip():
        raise ValidationError("No image file uploaded")
    mime = (upload.content_type or "").lower()
    if not mime.startswith("image/"):
        raise ValidationError("Not an image! Please upload an image.")
    return upload


def transient_name(original: Optional[str]) -> str:
    # sanitize filename; keep only a plain extension
    ext = os.path.splitext(os.path.basename(original or ""))[1]
    if not _EXT_RE.match(ext):
        ext = ""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext.lower()}"


def _discard(path: Path) -> None:
    try:
        path.unlink()
        log.debug(f"[uploads] removed {path.name}")
    except FileNotFoundError:
        pass


@contextmanager
def transient_upload(
    upload: UploadFile, upload_dir: str | Path, max_bytes: int
) -> Iterator[StoredImage]:
    """
    Stream ``upload`` into ``upload_dir`` and yield it as a StoredImage.

    The file is removed when the block exits, whatever the outcome. Uploads
    over ``max_bytes`` raise FileTooLargeError and leave nothing behind.
    """
    known = getattr(upload, "size", None)
    if known is not None and known > max_bytes:
        raise FileTooLargeError()

    drop = Path(upload_dir)
    drop.mkdir(parents=True, exist_ok=True)
    dest = drop / transient_name(upload.filename)
    try:
        total = 0
        with dest.open("wb") as f:
            while True:
                chunk = upload.file.read(CHUNK_BYTES)
                if not chunk:
                    break
                total += len(chunk)
                if total > max_bytes:
                    raise FileTooLargeError()
                f.write(chunk)
        log.info(f"[uploads] stored {dest.name} ({total} bytes)")
        yield StoredImage(
            path=dest,
            mime=(upload.content_type or "").lower(),
            size=total,
            original_name=os.path.basename(upload.filename or ""),
        )
    finally:
        _discard(dest)
