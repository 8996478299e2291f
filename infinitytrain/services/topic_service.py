"""
infinitytrain/services/topic_service.py
Topic subtree persistence

SAVE PROTOCOL (replace_topic):
==============================
The caller always sends the complete desired subtree. Inside ONE
transaction:

1. Upsert the topic row (title, icon, isdeleted).
2. Delete subtopics of this topic that are not in the new sequence
   (their comments and progress rows go with them via ON DELETE CASCADE).
3. Update surviving subtopics in place and insert new ones, rewriting
   sortorder from array position.
4. Delete every comment of the surviving subtopics and insert the comments
   given in the payload.
5. Commit. Any exception rolls the whole thing back, so readers see either
   the previous subtree or the new one, never a partial one.

Surviving subtopics keep their identity, which keeps users' progress on
them. Concurrent saves of the same topic are last-write-wins.

DATABASE OPERATIONS:
- READS: topics, subtopics, comments
- WRITES: topics, subtopics, comments (progress only via cascade)
"""

import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from infinitytrain.orm.comment import Comment, utcnow
from infinitytrain.orm.topic import Subtopic, Topic
from infinitytrain.schemas.topic import CommentIn, SubtopicIn, TopicIn, TopicOut

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def _hydrated_topics():
    return (
        select(Topic)
        .options(selectinload(Topic.subtopics).selectinload(Subtopic.comments))
        .execution_options(populate_existing=True)
    )


async def list_topics(db: AsyncSession, include_deleted: bool = True) -> List[Topic]:
    """
    All topics with their ordered subtopics and newest-first comments.

    Soft-deleted topics are included (with is_deleted set) unless
    include_deleted is False.
    """
    stmt = _hydrated_topics()
    if not include_deleted:
        stmt = stmt.where(Topic.is_deleted.is_(False))
    result = await db.execute(stmt)
    return list(result.scalars().unique().all())


async def get_topic(db: AsyncSession, topic_id: str) -> Optional[Topic]:
    """One hydrated topic, soft-deleted or not."""
    result = await db.execute(_hydrated_topics().where(Topic.id == topic_id))
    return result.scalars().unique().one_or_none()


def _build_comment(subtopic_id: str, comment: CommentIn) -> Comment:
    return Comment(
        id=comment.id or new_id(),
        subtopic_id=subtopic_id,
        user_id=comment.user_id,
        text=comment.text or None,
        image_url=comment.image_url or None,
        drawing_url=comment.drawing_url or None,
        timestamp=comment.timestamp or utcnow(),
    )


def _links_payload(subtopic: SubtopicIn) -> Optional[List[dict]]:
    if subtopic.resource_links is None:
        return None
    return [link.model_dump(mode="json") for link in subtopic.resource_links]


def _with_ids(payload: TopicIn) -> TopicIn:
    """Copy of payload with every missing id and comment timestamp filled in."""
    now = utcnow()
    subtopics = [
        subtopic.model_copy(update={
            "id": subtopic.id or new_id(),
            "comments": [
                comment.model_copy(update={
                    "id": comment.id or new_id(),
                    "timestamp": comment.timestamp or now,
                })
                for comment in subtopic.comments
            ],
        })
        for subtopic in payload.subtopics
    ]
    return payload.model_copy(update={"id": payload.id or new_id(), "subtopics": subtopics})


def _as_saved(payload: TopicIn) -> TopicOut:
    """The stored subtree as it reads back: comments newest first."""
    saved = TopicOut.model_validate(payload.model_dump())
    for subtopic in saved.subtopics:
        subtopic.comments.sort(key=lambda comment: comment.timestamp, reverse=True)
    return saved


async def _sync_subtopics(db: AsyncSession, topic_id: str, subtopics: List[SubtopicIn]) -> None:
    ids = [subtopic.id for subtopic in subtopics]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Duplicate subtopic id in topic {topic_id}")

    result = await db.execute(select(Subtopic).where(Subtopic.topic_id == topic_id))
    existing = {subtopic.id: subtopic for subtopic in result.scalars().all()}

    stale_ids = [subtopic_id for subtopic_id in existing if subtopic_id not in ids]
    if stale_ids:
        await db.execute(delete(Subtopic).where(Subtopic.id.in_(stale_ids)))
        for subtopic_id in stale_ids:
            existing.pop(subtopic_id)

    if existing:
        await db.execute(delete(Comment).where(Comment.subtopic_id.in_(list(existing))))

    for index, (subtopic_id, data) in enumerate(zip(ids, subtopics)):
        row = existing.get(subtopic_id)
        if row is None:
            row = Subtopic(id=subtopic_id, topic_id=topic_id)
            db.add(row)
        row.title = data.title
        row.resources = data.resources or ""
        row.resource_links = _links_payload(data)
        row.sort_order = index

        for comment in data.comments:
            db.add(_build_comment(subtopic_id, comment))


async def replace_topic(db: AsyncSession, payload: TopicIn) -> Union[Topic, TopicOut]:
    """
    Make the stored subtree of payload.id exactly equal to payload.

    Generates ids for the topic, subtopics and comments that have none.

    Returns:
        The re-read topic, or the saved payload if the re-read fails after
        the commit

    Raises:
        Whatever the store raised; the transaction is rolled back first.
    """
    payload = _with_ids(payload)
    topic_id = payload.id

    try:
        topic = await db.get(Topic, topic_id)
        if topic is None:
            topic = Topic(id=topic_id)
            db.add(topic)
        topic.title = payload.title
        topic.icon = payload.icon
        topic.is_deleted = payload.is_deleted
        await db.flush()

        await _sync_subtopics(db, topic_id, payload.subtopics)

        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Topic save rolled back for {topic_id}: {type(e).__name__}: {str(e)}")
        raise

    logger.info(f"Saved topic {topic_id} with {len(payload.subtopics)} subtopics")
    try:
        return await get_topic(db, topic_id)
    except Exception as e:
        logger.warning(f"Re-read of saved topic {topic_id} failed: {type(e).__name__}: {str(e)}")
        return _as_saved(payload)


async def _set_deleted(db: AsyncSession, topic_id: str, is_deleted: bool) -> bool:
    try:
        result = await db.execute(
            update(Topic)
            .where(Topic.id == topic_id)
            .values(is_deleted=is_deleted)
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return result.rowcount > 0


async def soft_delete_topic(db: AsyncSession, topic_id: str) -> bool:
    """Hide a topic. Child rows are untouched. False if the topic does not exist."""
    found = await _set_deleted(db, topic_id, True)
    if found:
        logger.info(f"Archived topic {topic_id}")
    return found


async def restore_topic(db: AsyncSession, topic_id: str) -> bool:
    """Un-hide a soft-deleted topic. False if the topic does not exist."""
    found = await _set_deleted(db, topic_id, False)
    if found:
        logger.info(f"Restored topic {topic_id}")
    return found


async def append_comment(db: AsyncSession, subtopic_id: str, comment: CommentIn) -> Comment:
    """Insert a single comment without touching the rest of the subtree."""
    row = _build_comment(subtopic_id, comment)
    db.add(row)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"Comment {row.id} added to subtopic {subtopic_id} by {row.user_id}")
    return row
