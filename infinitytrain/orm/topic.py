"""
infinitytrain/orm/topic.py
Topic and Subtopic models - the training content tree

Structure: Topic → Subtopic (ordered by sortorder) → Comment (newest first)

Subtopic rows are owned by exactly one Topic. Deleting a Topic row removes
its Subtopics, and through them their Comments and progress rows, using
database-level ON DELETE CASCADE (the relationships are passive_deletes so
the ORM never loads children just to delete them).
"""
import json
from typing import Any, List, Optional

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from infinitytrain.orm.base import Base

# Envelope version written to subtopics.resourcelinks
RESOURCE_LINKS_VERSION = 1


def encode_resource_links(links: Optional[List[dict]]) -> Optional[str]:
    """Serialize a resource link list into the versioned JSON envelope."""
    if links is None:
        return None
    return json.dumps({"version": RESOURCE_LINKS_VERSION, "links": links})


def decode_resource_links(raw: Optional[str]) -> Optional[List[dict]]:
    """
    Read the resourcelinks column.

    Accepts the versioned envelope and the legacy bare-array form.
    """
    if raw is None or raw == "":
        return None
    data: Any = json.loads(raw)
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        version = data.get("version", RESOURCE_LINKS_VERSION)
        if version != RESOURCE_LINKS_VERSION:
            raise ValueError(f"Unsupported resourcelinks version: {version}")
        return list(data.get("links") or [])
    raise ValueError("resourcelinks must be a JSON array or versioned object")


class Topic(Base):
    """
    A named training module.

    Soft delete: is_deleted hides the topic from active views without
    touching any child row; restore flips it back.
    """
    __tablename__ = "topics"

    id = Column(String(64), primary_key=True)
    title = Column(String(300), nullable=False)
    icon = Column(String(100), nullable=False)
    is_deleted = Column("isdeleted", Boolean, nullable=False, default=False)

    subtopics = relationship(
        "Subtopic",
        back_populates="topic",
        order_by="Subtopic.sort_order",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self):
        return f"<Topic(id={self.id}, title='{self.title}', is_deleted={self.is_deleted})>"


class Subtopic(Base):
    """
    A unit of content within a Topic.

    sort_order is the position within the topic's sequence and is rewritten
    for every subtopic whenever the topic is saved.
    """
    __tablename__ = "subtopics"

    id = Column(String(64), primary_key=True)
    topic_id = Column(
        "topicid",
        String(64),
        ForeignKey("topics.id", ondelete="CASCADE"),
        nullable=False
    )
    title = Column(String(300), nullable=False)
    resources = Column(Text, nullable=False, default="")
    resource_links_json = Column("resourcelinks", Text, nullable=True)
    sort_order = Column("sortorder", Integer, nullable=False, default=0)

    topic = relationship("Topic", back_populates="subtopics")

    comments = relationship(
        "Comment",
        back_populates="subtopic",
        order_by="Comment.timestamp.desc()",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index("idx_subtopics_topicid", "topicid"),
    )

    @property
    def resource_links(self) -> Optional[List[dict]]:
        return decode_resource_links(self.resource_links_json)

    @resource_links.setter
    def resource_links(self, links: Optional[List[dict]]) -> None:
        self.resource_links_json = encode_resource_links(links)

    def __repr__(self):
        return f"<Subtopic(id={self.id}, topic_id={self.topic_id}, sort_order={self.sort_order})>"
