"""
infinitytrain/schemas/progress.py
Progress schemas - one status per (user, subtopic)
"""
from infinitytrain.orm.progress import ProgressStatus
from infinitytrain.schemas.base import CamelModel


class ProgressRecord(CamelModel):
    """
    Used both as the POST /progress body and as the response item of
    GET /progress/{userId}.
    """
    user_id: str
    subtopic_id: str
    status: ProgressStatus

    class Config:
        json_schema_extra = {
            "example": {
                "userId": "u2",
                "subtopicId": "st1",
                "status": "good"
            }
        }
