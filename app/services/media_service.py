# app/services/media_service.py
import logging
import mimetypes
import os
import re
import time
from pathlib import Path
from typing import Optional

import aiofiles
from dotenv import load_dotenv
from fastapi import HTTPException, UploadFile, status

load_dotenv()

logger = logging.getLogger(__name__)

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000").rstrip("/")

# Folder names under UPLOAD_DIR
PROFILE_PICTURES = "profile_pictures"
BANNERS = "banners"
PROFILE_CONTENT = "profile_content"
IMAGES = "images"
VIDEOS = "videos"
OTHERS = "others"

# Uploads are copied to disk in pieces of this size
CHUNK_SIZE = 1024 * 1024


def _ensure_dir(folder: str) -> Path:
    path = Path(UPLOAD_DIR) / folder
    path.mkdir(parents=True, exist_ok=True)
    return path


def folder_for_content_type(content_type: Optional[str]) -> str:
    """images / videos / others, by MIME family."""
    ct = (content_type or "").lower()
    if ct.startswith("image"):
        return IMAGES
    if ct.startswith("video"):
        return VIDEOS
    return OTHERS


def media_type_for_content_type(content_type: Optional[str]) -> str:
    return "image" if (content_type or "").lower().startswith("image") else "video"


def build_filename(original_name: Optional[str], content_type: Optional[str] = None) -> str:
    """
    <epoch_ms>-<original name with whitespace replaced by _>.
    Adds an extension guessed from the content type (fallback .jpg) when the name has none.
    """
    name = Path(original_name or "upload").name
    name = re.sub(r"\s+", "_", name.strip()) or "upload"
    if not Path(name).suffix:
        ext = mimetypes.guess_extension(content_type or "") or ".jpg"
        name = f"{name}{ext}"
    return f"{int(time.time() * 1000)}-{name}"


async def save_upload(file: UploadFile, folder: str) -> str:
    """
    Writes the upload under UPLOAD_DIR/<folder>/ and returns the relative,
    forward-slashed path that gets stored on documents (e.g. uploads/images/1700-a.jpg).
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file was uploaded.")

    target_dir = _ensure_dir(folder)
    filename = build_filename(file.filename, file.content_type)
    target = target_dir / filename

    size = 0
    try:
        async with aiofiles.open(target, "wb") as f:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                await f.write(chunk)
                size += len(chunk)
    except OSError as e:
        logger.exception("Failed to store upload %s", file.filename)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Upload failed: {e}")

    # Path under the /uploads static mount, independent of where UPLOAD_DIR lives
    stored = f"uploads/{folder}/{filename}"
    logger.info("Stored upload %s (%d bytes)", stored, size)
    return stored


def public_url(path: Optional[str]) -> Optional[str]:
    """Absolute URL for a stored media path; remote URLs pass through untouched."""
    if not path:
        return path
    if path.startswith("http"):
        return path
    return f"{PUBLIC_BASE_URL}/{path.lstrip('/')}"
