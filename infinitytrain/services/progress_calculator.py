"""
infinitytrain/services/progress_calculator.py
Topic Progress Aggregation

Pure functions: no database, no side effects. Recomputed from the latest
fetched topics and progress records every time they are needed.

TWO DISTINCT METRICS:
=====================
1. WEIGHTED PROGRESS (headline percentage, drives topic state):
   Weighted % = mean(score per subtopic) × 100

   Scores:
   - fully_understood = 1.0
   - good             = 0.75
   - basic            = 0.25
   - not_addressed    = 0.0   (also used when no record exists)

2. STRICT MASTERY (the "N of M completed" display):
   completed = number of fully_understood subtopics
   Mastery % = completed / total × 100, rounded half up

Example: [fully_understood, good, basic, not_addressed]
   weighted = (1 + 0.75 + 0.25 + 0) / 4 × 100 = 50.0
   completed = 1, mastery = 25

TOPIC STATE (from weighted %):
- completed:   >= 100
- in-progress: > 0 and < 100
- not-started: 0

Topics without subtopics score 0 on both metrics.
"""

import math
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from infinitytrain.orm.progress import ProgressStatus

STATUS_SCORES = {
    ProgressStatus.fully_understood: 1.0,
    ProgressStatus.good: 0.75,
    ProgressStatus.basic: 0.25,
    ProgressStatus.not_addressed: 0.0,
}


class TopicState(str, Enum):
    completed = "completed"
    in_progress = "in-progress"
    not_started = "not-started"


@dataclass
class TopicStats:
    topic_id: str
    total: int
    not_addressed: int
    basic: int
    good: int
    fully_understood: int
    weighted_percentage: float
    mastery_percentage: int
    state: TopicState

    @property
    def completed(self) -> int:
        return self.fully_understood


def statuses_for_user(progress: Iterable, user_id: Optional[str]) -> Dict[str, ProgressStatus]:
    """Map subtopic id → status for one user's records."""
    if user_id is None:
        return {}
    return {
        record.subtopic_id: ProgressStatus(record.status)
        for record in progress
        if record.user_id == user_id
    }


def subtopic_status(statuses: Dict[str, ProgressStatus], subtopic_id: str) -> ProgressStatus:
    return statuses.get(subtopic_id, ProgressStatus.not_addressed)


def weighted_percentage(topic, statuses: Dict[str, ProgressStatus]) -> float:
    if not topic.subtopics:
        return 0.0
    score = sum(
        STATUS_SCORES[subtopic_status(statuses, subtopic.id)]
        for subtopic in topic.subtopics
    )
    return score / len(topic.subtopics) * 100


def topic_state(percentage: float) -> TopicState:
    if percentage >= 100:
        return TopicState.completed
    if percentage > 0:
        return TopicState.in_progress
    return TopicState.not_started


def topic_stats(topic, progress: Iterable, user_id: Optional[str]) -> TopicStats:
    """Both metrics plus the per-status breakdown for one topic and user."""
    statuses = statuses_for_user(progress, user_id)
    counts = Counter(subtopic_status(statuses, subtopic.id) for subtopic in topic.subtopics)
    total = len(topic.subtopics)

    weighted = weighted_percentage(topic, statuses)
    fully_understood = counts[ProgressStatus.fully_understood]
    mastery = math.floor(fully_understood / total * 100 + 0.5) if total else 0

    return TopicStats(
        topic_id=topic.id,
        total=total,
        not_addressed=counts[ProgressStatus.not_addressed],
        basic=counts[ProgressStatus.basic],
        good=counts[ProgressStatus.good],
        fully_understood=fully_understood,
        weighted_percentage=weighted,
        mastery_percentage=mastery,
        state=topic_state(weighted),
    )


def active_topics(topics: Iterable) -> List:
    """Drop soft-deleted topics."""
    return [topic for topic in topics if not topic.is_deleted]


def overview(topics: Iterable, progress: Iterable, user_id: Optional[str]) -> List[TopicStats]:
    """Stats for every active topic, in listing order."""
    progress = list(progress)
    return [topic_stats(topic, progress, user_id) for topic in active_topics(topics)]
