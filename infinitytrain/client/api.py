"""
infinitytrain/client/api.py
Async HTTP client for the InfinityTrain API

Every call returns parsed JSON (validated into the API schemas where one
exists). Non-2xx responses raise APIClientError carrying the status code
and the server's message.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from infinitytrain.orm.progress import ProgressStatus
from infinitytrain.schemas.progress import ProgressRecord
from infinitytrain.schemas.topic import CommentIn, TopicIn, TopicOut
from infinitytrain.schemas.user import UserOut

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class APIClientError(Exception):
    def __init__(self, status_code: int, message: str, code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.code = code
        super().__init__(f"{status_code}: {message}")


class TrainingAPI:
    """
    Thin wrapper over httpx.AsyncClient.

    Pass an existing client (for example one bound to an ASGI transport) or
    a base_url to have one created.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        client: Optional[httpx.AsyncClient] = None,
        prefix: str = "/api"
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=DEFAULT_TIMEOUT)
        self._prefix = prefix

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, f"{self._prefix}{path}", **kwargs)
        if response.is_success:
            return response.json()

        message = response.reason_phrase
        code = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("message") or body.get("error") or message
                code = body.get("code")
        except ValueError:
            pass
        logger.warning(f"{method} {path} failed: {response.status_code} {message}")
        raise APIClientError(response.status_code, message, code)

    # ================= TOPICS =================

    async def list_topics(self, include_deleted: bool = True) -> List[TopicOut]:
        data = await self._request(
            "GET", "/topics",
            params={"includeDeleted": str(include_deleted).lower()}
        )
        return [TopicOut.model_validate(item) for item in data]

    async def get_topic(self, topic_id: str) -> TopicOut:
        return TopicOut.model_validate(await self._request("GET", f"/topics/{topic_id}"))

    async def save_topic(self, topic: TopicIn) -> TopicOut:
        body = topic.model_dump(mode="json", by_alias=True, exclude_none=True)
        if topic.id:
            data = await self._request("PUT", f"/topics/{topic.id}", json=body)
        else:
            data = await self._request("POST", "/topics", json=body)
        return TopicOut.model_validate(data)

    async def delete_topic(self, topic_id: str) -> None:
        await self._request("DELETE", f"/topics/{topic_id}")

    async def restore_topic(self, topic_id: str) -> None:
        await self._request("POST", f"/topics/{topic_id}/restore")

    # ================= PROGRESS =================

    async def get_progress(self, user_id: str) -> List[ProgressRecord]:
        data = await self._request("GET", f"/progress/{user_id}")
        return [ProgressRecord.model_validate(item) for item in data]

    async def save_progress(self, user_id: str, subtopic_id: str, status: ProgressStatus) -> ProgressRecord:
        record = ProgressRecord(user_id=user_id, subtopic_id=subtopic_id, status=status)
        data = await self._request("POST", "/progress", json=record.model_dump(mode="json", by_alias=True))
        return ProgressRecord.model_validate(data)

    # ================= USERS =================

    async def list_users(self) -> List[UserOut]:
        return [UserOut.model_validate(item) for item in await self._request("GET", "/users")]

    async def get_user(self, user_id: str) -> UserOut:
        return UserOut.model_validate(await self._request("GET", f"/users/{user_id}"))

    async def update_user(self, user_id: str, **changes) -> UserOut:
        body = {key: value for key, value in changes.items() if value is not None}
        return UserOut.model_validate(await self._request("PATCH", f"/users/{user_id}", json=body))

    async def login(self, email: str) -> UserOut:
        return UserOut.model_validate(await self._request("POST", "/login", json={"email": email}))

    async def signup(self, name: str, email: str) -> UserOut:
        data = await self._request("POST", "/signup", json={"name": name, "email": email, "role": "employee"})
        return UserOut.model_validate(data)

    # ================= COMMENTS & UPLOADS =================

    async def add_comment(self, subtopic_id: str, comment: CommentIn) -> Dict[str, Any]:
        body = {
            "subtopicId": subtopic_id,
            "comment": comment.model_dump(mode="json", by_alias=True, exclude_none=True),
        }
        return await self._request("POST", "/comments", json=body)

    async def upload(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        data = await self._request("POST", "/upload", files={"file": (filename, content, content_type)})
        return data["url"]
