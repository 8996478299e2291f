from .base import Base

from .user import User, UserRole
from .topic import Topic, Subtopic
from .comment import Comment
from .progress import UserProgress, ProgressStatus

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Topic",
    "Subtopic",
    "Comment",
    "UserProgress",
    "ProgressStatus",
]
