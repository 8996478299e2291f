"""
infinitytrain/orm/progress.py
UserProgress - one self-assessed status per (user, subtopic)

(userid, subtopicid) is the natural key and the primary key: saving a new
status overwrites the previous one, no history is kept. A missing row means
not_addressed.
"""
from enum import Enum

from sqlalchemy import Column, ForeignKey, Index, String, Enum as SQLEnum

from infinitytrain.orm.base import Base


class ProgressStatus(str, Enum):
    """Self-assessment levels, lowest to highest"""
    not_addressed = "not_addressed"
    basic = "basic"
    good = "good"
    fully_understood = "fully_understood"


class UserProgress(Base):
    __tablename__ = "progress"

    user_id = Column(
        "userid",
        String(64),
        ForeignKey("users.id"),
        primary_key=True
    )
    subtopic_id = Column(
        "subtopicid",
        String(64),
        ForeignKey("subtopics.id", ondelete="CASCADE"),
        primary_key=True
    )
    status = Column(
        SQLEnum(ProgressStatus, native_enum=False, length=32),
        nullable=False,
        default=ProgressStatus.not_addressed
    )

    __table_args__ = (
        Index("idx_progress_userid", "userid"),
    )

    def __repr__(self):
        return f"<UserProgress(user_id={self.user_id}, subtopic_id={self.subtopic_id}, status={self.status})>"
