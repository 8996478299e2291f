"""
infinitytrain/client/state.py
Client-side application state

Holds the signed-in user, the optional "view as" user, and the last fetched
users, topics and progress. Every derived number (percentages, counts,
topic state) is recomputed from that snapshot through progress_calculator,
so there is no cached aggregate to go stale.

Rules:
- Only admins can view as another user; selecting yourself clears it.
- Progress can only be changed for the signed-in user, and not while
  viewing as someone else.
"""
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from infinitytrain.client.api import TrainingAPI
from infinitytrain.orm.progress import ProgressStatus
from infinitytrain.orm.user import UserRole
from infinitytrain.schemas.progress import ProgressRecord
from infinitytrain.schemas.topic import CommentIn, TopicIn, TopicOut
from infinitytrain.schemas.user import UserOut
from infinitytrain.services import progress_calculator
from infinitytrain.services.progress_calculator import TopicStats

logger = logging.getLogger(__name__)


class StateError(Exception):
    """Raised when an action is not allowed in the current state."""


class TrainingState:
    def __init__(self, api: TrainingAPI):
        self.api = api
        self.current_user: Optional[UserOut] = None
        self.view_as_user: Optional[UserOut] = None
        self.users: List[UserOut] = []
        self.topics: List[TopicOut] = []
        self.progress: List[ProgressRecord] = []

    # ================= SESSION =================

    async def login(self, email: str) -> UserOut:
        self.current_user = await self.api.login(email)
        self.view_as_user = None
        await self.load()
        return self.current_user

    async def signup(self, name: str, email: str) -> UserOut:
        self.current_user = await self.api.signup(name, email)
        self.view_as_user = None
        await self.load()
        return self.current_user

    def logout(self) -> None:
        self.current_user = None
        self.view_as_user = None
        self.users = []
        self.topics = []
        self.progress = []

    @property
    def is_admin(self) -> bool:
        return self.current_user is not None and self.current_user.role == UserRole.admin

    @property
    def display_user(self) -> Optional[UserOut]:
        """The user whose progress is shown: the view-as user if set."""
        return self.view_as_user or self.current_user

    async def view_as(self, user_id: Optional[str]) -> Optional[UserOut]:
        """Switch the displayed user and fetch their progress."""
        if not self.is_admin:
            raise StateError("Only admins can view other users' progress")

        previous = self.display_user
        if user_id is None or user_id == self.current_user.id:
            self.view_as_user = None
        else:
            user = next((u for u in self.users if u.id == user_id), None)
            if user is None:
                raise StateError(f"Unknown user: {user_id}")
            self.view_as_user = user

        if previous is None or previous.id != self.display_user.id:
            await self.refresh_progress()
        return self.display_user

    # ================= FETCHING =================

    async def load(self) -> None:
        self.users = await self.api.list_users()
        await self.refresh_topics()
        await self.refresh_progress()

    async def refresh_topics(self) -> None:
        self.topics = await self.api.list_topics()

    async def refresh_progress(self) -> None:
        user = self.display_user
        self.progress = await self.api.get_progress(user.id) if user else []

    # ================= DERIVED VIEWS =================

    @property
    def active_topics(self) -> List[TopicOut]:
        return progress_calculator.active_topics(self.topics)

    @property
    def archived_topics(self) -> List[TopicOut]:
        return [topic for topic in self.topics if topic.is_deleted]

    def find_topic(self, topic_id: str) -> Optional[TopicOut]:
        return next((topic for topic in self.topics if topic.id == topic_id), None)

    def status_of(self, subtopic_id: str) -> ProgressStatus:
        user = self.display_user
        statuses = progress_calculator.statuses_for_user(self.progress, user.id if user else None)
        return progress_calculator.subtopic_status(statuses, subtopic_id)

    def topic_stats(self, topic_id: str) -> TopicStats:
        topic = self.find_topic(topic_id)
        if topic is None:
            raise StateError(f"Unknown topic: {topic_id}")
        user = self.display_user
        return progress_calculator.topic_stats(topic, self.progress, user.id if user else None)

    def overview(self) -> List[TopicStats]:
        user = self.display_user
        return progress_calculator.overview(self.topics, self.progress, user.id if user else None)

    # ================= ACTIONS =================

    async def set_status(self, subtopic_id: str, status: ProgressStatus) -> ProgressRecord:
        if self.current_user is None:
            raise StateError("Not signed in")
        if self.view_as_user is not None:
            raise StateError("Progress is read-only while viewing another user")

        record = await self.api.save_progress(self.current_user.id, subtopic_id, status)
        self.progress = [
            p for p in self.progress
            if not (p.user_id == record.user_id and p.subtopic_id == record.subtopic_id)
        ]
        self.progress.append(record)
        return record

    async def add_comment(
        self,
        subtopic_id: str,
        text: Optional[str] = None,
        image_url: Optional[str] = None,
        drawing_url: Optional[str] = None
    ) -> str:
        if self.current_user is None:
            raise StateError("Not signed in")

        comment = CommentIn(
            id=f"c-{int(time.time() * 1000)}",
            user_id=self.current_user.id,
            text=text,
            image_url=image_url,
            drawing_url=drawing_url,
            timestamp=datetime.now(timezone.utc),
        )
        result = await self.api.add_comment(subtopic_id, comment)
        await self.refresh_topics()
        return result["id"]

    async def save_topic(self, topic: TopicIn) -> TopicOut:
        """Send the complete subtree and re-fetch the listing."""
        if not self.is_admin:
            raise StateError("Only admins can edit topics")

        saved = await self.api.save_topic(topic)
        await self.refresh_topics()
        return saved

    async def archive_topic(self, topic_id: str) -> None:
        if not self.is_admin:
            raise StateError("Only admins can archive topics")
        await self.api.delete_topic(topic_id)
        await self.refresh_topics()

    async def restore_topic(self, topic_id: str) -> None:
        if not self.is_admin:
            raise StateError("Only admins can restore topics")
        await self.api.restore_topic(topic_id)
        await self.refresh_topics()

    @staticmethod
    def editable_copy(topic: TopicOut) -> TopicIn:
        """Turn a fetched topic into a full-subtree payload for save_topic."""
        return TopicIn.model_validate(topic.model_dump())
