"""
infinitytrain/routes/topics.py
Topic subtree endpoints: list, fetch, save (whole subtree), archive, restore
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.database import get_db
from infinitytrain.errors import ErrorCode, log_and_raise_internal, raise_not_found
from infinitytrain.schemas.topic import TopicIn, TopicOut
from infinitytrain.services import topic_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/topics", tags=["Topics"])


@router.get("", response_model=List[TopicOut])
async def list_topics(
    include_deleted: bool = Query(True, alias="includeDeleted"),
    db: AsyncSession = Depends(get_db)
):
    """
    All topics with subtopics and comments.

    Archived topics are included (isDeleted=true) unless includeDeleted=false.
    """
    try:
        return await topic_service.list_topics(db, include_deleted=include_deleted)
    except Exception as e:
        log_and_raise_internal(e, "list_topics", "Failed to fetch topics")


@router.get("/{topic_id}", response_model=TopicOut)
async def get_topic(topic_id: str, db: AsyncSession = Depends(get_db)):
    try:
        topic = await topic_service.get_topic(db, topic_id)
    except Exception as e:
        log_and_raise_internal(e, "get_topic", "Failed to fetch topic")

    if topic is None:
        raise_not_found("Topic", topic_id, code=ErrorCode.TOPIC_NOT_FOUND)
    return topic


async def _save(db: AsyncSession, payload: TopicIn, context: str):
    try:
        return await topic_service.replace_topic(db, payload)
    except Exception as e:
        log_and_raise_internal(e, context, "Failed to save topic")


@router.post("", response_model=TopicOut)
async def save_topic(payload: TopicIn, db: AsyncSession = Depends(get_db)):
    """
    Create or replace a topic. The body must be the complete subtree:
    subtopics missing from it are deleted, comments missing from it are
    dropped.
    """
    return await _save(db, payload, "save_topic")


@router.put("/{topic_id}", response_model=TopicOut)
async def update_topic(topic_id: str, payload: TopicIn, db: AsyncSession = Depends(get_db)):
    """Same as POST /topics; the id in the path wins over the body."""
    payload = payload.model_copy(update={"id": topic_id})
    return await _save(db, payload, "update_topic")


@router.delete("/{topic_id}")
async def delete_topic(topic_id: str, db: AsyncSession = Depends(get_db)):
    """Archive (soft delete) a topic. Subtopics, comments and progress stay."""
    try:
        found = await topic_service.soft_delete_topic(db, topic_id)
    except Exception as e:
        log_and_raise_internal(e, "delete_topic", "Failed to delete topic")

    if not found:
        raise_not_found("Topic", topic_id, code=ErrorCode.TOPIC_NOT_FOUND)
    return {"success": True}


@router.post("/{topic_id}/restore")
async def restore_topic(topic_id: str, db: AsyncSession = Depends(get_db)):
    try:
        found = await topic_service.restore_topic(db, topic_id)
    except Exception as e:
        log_and_raise_internal(e, "restore_topic", "Failed to restore topic")

    if not found:
        raise_not_found("Topic", topic_id, code=ErrorCode.TOPIC_NOT_FOUND)
    return {"success": True}
