"""
infinitytrain/routes/progress.py
Self-assessed progress per (user, subtopic)
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.database import get_db
from infinitytrain.errors import log_and_raise_internal
from infinitytrain.schemas.progress import ProgressRecord
from infinitytrain.services import progress_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/progress", tags=["Progress"])


@router.get("/{user_id}", response_model=List[ProgressRecord])
async def get_progress(user_id: str, db: AsyncSession = Depends(get_db)):
    """Stored progress rows for one user. Subtopics without a row are not_addressed."""
    try:
        return await progress_service.list_progress(db, user_id)
    except Exception as e:
        log_and_raise_internal(e, "get_progress", "Failed to fetch progress")


@router.post("", response_model=ProgressRecord)
async def save_progress(payload: ProgressRecord, db: AsyncSession = Depends(get_db)):
    """Insert or overwrite the status for (userId, subtopicId)."""
    try:
        return await progress_service.upsert_progress(
            db,
            user_id=payload.user_id,
            subtopic_id=payload.subtopic_id,
            status=payload.status
        )
    except Exception as e:
        log_and_raise_internal(e, "save_progress", "Failed to save progress")
