"""
infinitytrain/orm/comment.py
Comment model - notes and attachments left on a subtopic

Comments are append-only: created, never edited. They are only removed
when their subtopic is removed or when a topic save drops them from the
subtree.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from infinitytrain.orm.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(64), primary_key=True)
    subtopic_id = Column(
        "subtopicid",
        String(64),
        ForeignKey("subtopics.id", ondelete="CASCADE"),
        nullable=False
    )
    user_id = Column(
        "userid",
        String(64),
        ForeignKey("users.id"),
        nullable=False
    )
    text = Column(Text, nullable=True)
    image_url = Column("imageurl", String(1024), nullable=True)
    drawing_url = Column("drawingurl", String(1024), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    subtopic = relationship("Subtopic", back_populates="comments")

    __table_args__ = (
        Index("idx_comments_subtopicid", "subtopicid"),
    )

    def __repr__(self):
        return f"<Comment(id={self.id}, subtopic_id={self.subtopic_id}, user_id={self.user_id})>"
