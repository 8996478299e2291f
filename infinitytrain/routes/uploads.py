"""
infinitytrain/routes/uploads.py
Generic multipart upload - returns the URL the file is served under
"""
import logging
from typing import Optional

from fastapi import APIRouter, File, UploadFile

from infinitytrain.errors import APIError, ErrorCode, log_and_raise_internal, raise_bad_request
from infinitytrain.services.upload_service import save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["Uploads"])


@router.post("")
async def upload_file(file: Optional[UploadFile] = File(None)):
    """
    Store a single file (any type, size limited).

    Returns:
        {"url": "/uploads/<generated-name>"}
    """
    if file is None or not file.filename:
        raise_bad_request("No file uploaded", code=ErrorCode.MISSING_FIELD, details={"field": "file"})

    try:
        url = await save_upload(file)
    except APIError:
        raise
    except Exception as e:
        log_and_raise_internal(e, "upload_file", "Failed to upload file")
    finally:
        await file.close()

    return {"url": url}
