"""
infinitytrain/services/progress_service.py
Per-(user, subtopic) progress persistence

Saving a status is an upsert on the natural key (userid, subtopicid):
exactly one row is inserted or updated, no history is kept.
"""
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.orm.progress import ProgressStatus, UserProgress

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def list_progress(db: AsyncSession, user_id: str) -> List[UserProgress]:
    """All stored progress rows for one user."""
    result = await db.execute(
        select(UserProgress).where(UserProgress.user_id == user_id)
    )
    return list(result.scalars().all())


async def _upsert_row(db: AsyncSession, user_id: str, subtopic_id: str, status: ProgressStatus) -> None:
    dialect = db.bind.dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)

    if insert is None:
        row = await db.get(UserProgress, (user_id, subtopic_id))
        if row is None:
            db.add(UserProgress(user_id=user_id, subtopic_id=subtopic_id, status=status))
        else:
            row.status = status
        return

    table = UserProgress.__table__
    stmt = insert(table).values(userid=user_id, subtopicid=subtopic_id, status=status)
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.userid, table.c.subtopicid],
        set_={"status": stmt.excluded.status},
    )
    await db.execute(stmt)


async def upsert_progress(
    db: AsyncSession,
    user_id: str,
    subtopic_id: str,
    status: ProgressStatus
) -> UserProgress:
    """Insert or overwrite the status for (user_id, subtopic_id)."""
    try:
        await _upsert_row(db, user_id, subtopic_id, status)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Progress saved: user={user_id}, subtopic={subtopic_id}, status={status.value}")
    return UserProgress(user_id=user_id, subtopic_id=subtopic_id, status=status)
