"""
infinitytrain/routes/comments.py
Append a single comment to a subtopic
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.database import get_db
from infinitytrain.errors import log_and_raise_internal
from infinitytrain.schemas.topic import CommentCreateRequest
from infinitytrain.services import topic_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.post("")
async def add_comment(payload: CommentCreateRequest, db: AsyncSession = Depends(get_db)):
    """
    Insert one comment without re-saving the topic.

    Returns the stored comment id so callers that did not supply one can
    refer to it.
    """
    try:
        comment = await topic_service.append_comment(db, payload.subtopic_id, payload.comment)
    except Exception as e:
        log_and_raise_internal(e, "add_comment", "Failed to save comment")

    return {"success": True, "id": comment.id}
