"""
Unit tests for the progress aggregator (pure functions, no database).
"""
from types import SimpleNamespace

import pytest

from infinitytrain.orm.progress import ProgressStatus
from infinitytrain.services.progress_calculator import (
    TopicState,
    active_topics,
    overview,
    statuses_for_user,
    topic_state,
    topic_stats,
)


def topic(topic_id, subtopic_ids, is_deleted=False):
    return SimpleNamespace(
        id=topic_id,
        is_deleted=is_deleted,
        subtopics=[SimpleNamespace(id=sid) for sid in subtopic_ids],
    )


def record(user_id, subtopic_id, status):
    return SimpleNamespace(user_id=user_id, subtopic_id=subtopic_id, status=status)


class TestTopicStats:

    def test_mixed_statuses(self):
        t = topic("t1", ["a", "b", "c", "d"])
        progress = [
            record("u", "a", ProgressStatus.fully_understood),
            record("u", "b", ProgressStatus.good),
            record("u", "c", ProgressStatus.basic),
            record("u", "d", ProgressStatus.not_addressed),
        ]

        stats = topic_stats(t, progress, "u")

        assert stats.weighted_percentage == 50.0
        assert stats.completed == 1
        assert stats.mastery_percentage == 25
        assert stats.total == 4
        assert (stats.not_addressed, stats.basic, stats.good, stats.fully_understood) == (1, 1, 1, 1)
        assert stats.state == TopicState.in_progress

    def test_missing_records_count_as_not_addressed(self):
        t = topic("t1", ["a", "b"])
        stats = topic_stats(t, [record("u", "a", ProgressStatus.good)], "u")

        assert stats.weighted_percentage == 37.5
        assert stats.not_addressed == 1
        assert stats.state == TopicState.in_progress

    def test_all_fully_understood_is_completed(self):
        t = topic("t1", ["a", "b"])
        progress = [
            record("u", "a", ProgressStatus.fully_understood),
            record("u", "b", ProgressStatus.fully_understood),
        ]
        stats = topic_stats(t, progress, "u")

        assert stats.weighted_percentage == 100.0
        assert stats.mastery_percentage == 100
        assert stats.state == TopicState.completed

    def test_all_good_is_not_completed(self):
        t = topic("t1", ["a", "b"])
        progress = [record("u", "a", ProgressStatus.good), record("u", "b", ProgressStatus.good)]
        stats = topic_stats(t, progress, "u")

        assert stats.weighted_percentage == 75.0
        assert stats.completed == 0
        assert stats.state == TopicState.in_progress

    def test_empty_topic_scores_zero(self):
        stats = topic_stats(topic("t1", []), [], "u")

        assert stats.weighted_percentage == 0
        assert stats.mastery_percentage == 0
        assert stats.total == 0
        assert stats.state == TopicState.not_started

    def test_other_users_records_are_ignored(self):
        t = topic("t1", ["a"])
        progress = [record("someone-else", "a", ProgressStatus.fully_understood)]

        stats = topic_stats(t, progress, "u")
        assert stats.weighted_percentage == 0
        assert stats.state == TopicState.not_started

    def test_no_user_means_nothing_addressed(self):
        t = topic("t1", ["a"])
        stats = topic_stats(t, [record("u", "a", ProgressStatus.good)], None)
        assert stats.weighted_percentage == 0

    def test_weighted_percentage_is_not_rounded(self):
        t = topic("t1", ["a", "b", "c"])
        stats = topic_stats(t, [record("u", "a", ProgressStatus.basic)], "u")
        assert stats.weighted_percentage == pytest.approx(25 / 3)

    @pytest.mark.parametrize("done, total, expected", [
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),   # 12.5 rounds half up
        (3, 8, 38),   # 37.5 rounds half up
    ])
    def test_mastery_rounds_half_up(self, done, total, expected):
        ids = [f"s{i}" for i in range(total)]
        progress = [record("u", sid, ProgressStatus.fully_understood) for sid in ids[:done]]
        assert topic_stats(topic("t1", ids), progress, "u").mastery_percentage == expected

    def test_string_statuses_are_accepted(self):
        t = topic("t1", ["a"])
        stats = topic_stats(t, [record("u", "a", "good")], "u")
        assert stats.weighted_percentage == 75.0


class TestStateAndFilters:

    @pytest.mark.parametrize("percentage, expected", [
        (0, TopicState.not_started),
        (0.1, TopicState.in_progress),
        (99.9, TopicState.in_progress),
        (100, TopicState.completed),
    ])
    def test_topic_state_thresholds(self, percentage, expected):
        assert topic_state(percentage) == expected

    def test_state_values_match_wire_names(self):
        assert TopicState.in_progress.value == "in-progress"
        assert TopicState.not_started.value == "not-started"

    def test_active_topics_drops_archived(self):
        topics = [topic("t1", []), topic("t2", [], is_deleted=True), topic("t3", [])]
        assert [t.id for t in active_topics(topics)] == ["t1", "t3"]

    def test_overview_keeps_listing_order(self):
        topics = [topic("t2", ["b"]), topic("t1", ["a"]), topic("t9", ["z"], is_deleted=True)]
        progress = [record("u", "a", ProgressStatus.fully_understood)]

        result = overview(topics, iter(progress), "u")

        assert [s.topic_id for s in result] == ["t2", "t1"]
        assert [s.state for s in result] == [TopicState.not_started, TopicState.completed]

    def test_statuses_for_user_filters_by_user(self):
        progress = [record("u", "a", "basic"), record("v", "b", "good")]
        assert statuses_for_user(progress, "u") == {"a": ProgressStatus.basic}
