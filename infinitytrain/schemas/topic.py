"""
infinitytrain/schemas/topic.py
Topic subtree schemas

A TopicIn is always the COMPLETE desired subtree: every subtopic, in order,
with every comment that should survive the save.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from infinitytrain.schemas.base import CamelModel


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Stored as UTC wall time; SQLite hands back naive datetimes
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ResourceLinkType(str, Enum):
    video = "video"
    document = "document"
    link = "link"


class ResourceLink(CamelModel):
    type: ResourceLinkType = ResourceLinkType.link
    title: str
    url: str


# ================= COMMENTS =================

class CommentIn(CamelModel):
    id: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    text: Optional[str] = None
    image_url: Optional[str] = None
    drawing_url: Optional[str] = None
    timestamp: Optional[datetime] = None

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value):
        return _as_utc(value)


class CommentOut(CamelModel):
    id: str
    user_id: str
    text: Optional[str] = None
    image_url: Optional[str] = None
    drawing_url: Optional[str] = None
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value):
        return _as_utc(value)


class CommentCreateRequest(CamelModel):
    """Body of POST /comments"""
    subtopic_id: str = Field(..., min_length=1)
    comment: CommentIn

    class Config:
        json_schema_extra = {
            "example": {
                "subtopicId": "st1",
                "comment": {
                    "id": "c-1712345678",
                    "userId": "u2",
                    "text": "Drill scheduled for Friday",
                    "imageUrl": "/uploads/1712345678-123456789.png"
                }
            }
        }


# ================= SUBTOPICS =================

class SubtopicIn(CamelModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    resources: str = ""
    resource_links: Optional[List[ResourceLink]] = None
    comments: List[CommentIn] = Field(default_factory=list)


class SubtopicOut(CamelModel):
    id: str
    title: str
    resources: str
    resource_links: Optional[List[ResourceLink]] = None
    comments: List[CommentOut] = Field(default_factory=list)


# ================= TOPICS =================

class TopicIn(CamelModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    icon: str = "BookOpen"
    is_deleted: bool = False
    subtopics: List[SubtopicIn] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "t1",
                "title": "Safety First",
                "icon": "ShieldCheck",
                "isDeleted": False,
                "subtopics": [
                    {
                        "id": "st1",
                        "title": "Emergency Procedures",
                        "resources": "# Emergency Procedures",
                        "resourceLinks": [
                            {"type": "video", "title": "Muster drill", "url": "https://example.com/drill"}
                        ],
                        "comments": []
                    }
                ]
            }
        }


class TopicOut(CamelModel):
    id: str
    title: str
    icon: str
    is_deleted: bool = False
    subtopics: List[SubtopicOut] = Field(default_factory=list)
