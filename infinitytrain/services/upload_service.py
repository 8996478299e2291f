"""
infinitytrain/services/upload_service.py
Attachment storage for comments and avatars

Files of any type up to MAX_UPLOAD_BYTES are written to UPLOAD_DIR under a
generated name and served back as static assets at /uploads/<name>.
"""
import logging
import os
import random
import time
from pathlib import Path

import aiofiles
from fastapi import UploadFile

from infinitytrain.config import settings
from infinitytrain.errors import BadRequestError, ErrorCode

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def ensure_upload_dir(upload_dir: str = None) -> Path:
    path = Path(upload_dir or settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def generate_filename(original_name: str) -> str:
    """<epoch millis>-<random 9 digits><original extension>"""
    extension = os.path.splitext(original_name or "")[1]
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999)}"
    return f"{unique_suffix}{extension}"


async def save_upload(file: UploadFile, upload_dir: str = None, max_bytes: int = None) -> str:
    """
    Stream an uploaded file to disk.

    Returns:
        The relative URL the file is served under

    Raises:
        BadRequestError if the file exceeds the size limit (the partial file
        is removed)
    """
    limit = max_bytes if max_bytes is not None else settings.MAX_UPLOAD_BYTES
    target_dir = ensure_upload_dir(upload_dir)
    filename = generate_filename(file.filename)
    file_path = target_dir / filename

    written = 0
    too_large = False
    async with aiofiles.open(file_path, "wb") as out:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > limit:
                too_large = True
                break
            await out.write(chunk)

    if too_large:
        file_path.unlink(missing_ok=True)
        raise BadRequestError(
            f"File too large. Maximum size is {limit / (1024 * 1024):.0f}MB",
            code=ErrorCode.FILE_TOO_LARGE,
            details={"max_bytes": limit}
        )

    logger.info(f"Upload saved: {file_path} ({written} bytes)")
    return f"{settings.UPLOAD_URL_PREFIX}/{filename}"
