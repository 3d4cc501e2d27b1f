"""
Image upload storage on the local filesystem.

Uploaded images are written to `UPLOAD_DIR` under a random name and the
resulting path is what gets stored on users/places. The same directory is
served statically at `/uploads/images` (see `api/main.py`).
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

from fastapi import UploadFile

from . import errors

DEFAULT_UPLOAD_DIR = "uploads/images"

# 500 kB per image.
DEFAULT_MAX_UPLOAD_BYTES = 500_000

MIME_TYPE_MAP = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpg",
}

logger = logging.getLogger(__name__)


def upload_dir() -> Path:
    return Path(os.environ.get("UPLOAD_DIR", DEFAULT_UPLOAD_DIR).strip() or DEFAULT_UPLOAD_DIR)


def max_upload_bytes() -> int:
    raw = os.environ.get("MAX_UPLOAD_BYTES", "").strip()
    if not raw:
        return DEFAULT_MAX_UPLOAD_BYTES
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_MAX_UPLOAD_BYTES
    return value if value > 0 else DEFAULT_MAX_UPLOAD_BYTES


def ensure_upload_dir() -> Path:
    path = upload_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_image(file: UploadFile) -> str:
    """
    Return the file extension to store the upload under.
    """
    content_type = (file.content_type or "").lower()
    ext = MIME_TYPE_MAP.get(content_type)
    if ext is None:
        raise errors.ValidationError("Invalid mime type!")
    return ext


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    chunk_size = 64 * 1024
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise errors.HttpError(f"File too large. Max is {max_bytes} bytes.", 413)

    return bytes(buf)


async def save_image(file: UploadFile) -> str:
    """
    Validate and persist an uploaded image, returning its stored path.
    """
    ext = validate_image(file)
    data = await read_upload_bytes(file, max_bytes=max_upload_bytes())
    if not data:
        raise errors.ValidationError("Uploaded image is empty.")

    target = ensure_upload_dir() / f"{uuid.uuid4()}.{ext}"
    target.write_bytes(data)
    return target.as_posix()


def remove_file(path: str) -> bool:
    """
    Best-effort removal. Failures are logged and reported as False.
    """
    try:
        Path(path).unlink()
    except OSError as exc:
        logger.warning("Could not remove file %s: %s", path, exc)
        return False
    return True
