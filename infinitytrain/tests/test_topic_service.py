"""
Topic subtree save protocol: round trip, ordering, atomicity, soft delete.
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from infinitytrain.orm.comment import Comment
from infinitytrain.orm.progress import ProgressStatus, UserProgress
from infinitytrain.orm.topic import Subtopic
from infinitytrain.schemas.topic import CommentIn, ResourceLink, SubtopicIn, TopicIn, TopicOut
from infinitytrain.services import topic_service
from infinitytrain.services.progress_service import upsert_progress


def make_topic(**overrides) -> TopicIn:
    data = {
        "id": "t1",
        "title": "Safety First",
        "icon": "ShieldCheck",
        "subtopics": [
            SubtopicIn(
                id="st1",
                title="Emergency Procedures",
                resources="# Emergency Procedures",
                resource_links=[ResourceLink(type="video", title="Drill", url="https://example.com/drill")],
                comments=[CommentIn(id="c1", user_id="u2", text="Read it")],
            ),
            SubtopicIn(id="st2", title="PPE Guidelines", resources="# PPE"),
        ],
    }
    data.update(overrides)
    return TopicIn(**data)


async def count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar()


@pytest.mark.asyncio
async def test_save_then_read_returns_same_subtree(db, employee):
    await topic_service.replace_topic(db, make_topic())

    topic = await topic_service.get_topic(db, "t1")
    assert topic.title == "Safety First"
    assert topic.icon == "ShieldCheck"
    assert topic.is_deleted is False
    assert [s.id for s in topic.subtopics] == ["st1", "st2"]

    first = topic.subtopics[0]
    assert first.resources == "# Emergency Procedures"
    assert first.resource_links == [{"type": "video", "title": "Drill", "url": "https://example.com/drill"}]
    assert [c.id for c in first.comments] == ["c1"]
    assert first.comments[0].text == "Read it"
    assert topic.subtopics[1].resource_links is None


@pytest.mark.asyncio
async def test_save_generates_missing_ids(db, employee):
    payload = TopicIn(
        title="New Topic",
        subtopics=[SubtopicIn(title="Intro", comments=[CommentIn(user_id="u2", text="hi")])],
    )
    topic = await topic_service.replace_topic(db, payload)

    assert topic.id
    assert topic.icon == "BookOpen"
    assert topic.subtopics[0].id
    assert topic.subtopics[0].comments[0].id


@pytest.mark.asyncio
async def test_reorder_rewrites_sort_order(db, employee):
    await topic_service.replace_topic(db, make_topic())

    reordered = make_topic(subtopics=[
        SubtopicIn(id="st2", title="PPE Guidelines"),
        SubtopicIn(id="st1", title="Emergency Procedures"),
    ])
    topic = await topic_service.replace_topic(db, reordered)

    assert [s.id for s in topic.subtopics] == ["st2", "st1"]
    result = await db.execute(select(Subtopic.id, Subtopic.sort_order).order_by(Subtopic.sort_order))
    assert result.all() == [("st2", 0), ("st1", 1)]


@pytest.mark.asyncio
async def test_dropped_subtopic_takes_comments_and_progress_with_it(db, employee):
    await topic_service.replace_topic(db, make_topic())
    await upsert_progress(db, "u2", "st1", ProgressStatus.good)
    await upsert_progress(db, "u2", "st2", ProgressStatus.basic)

    topic = await topic_service.replace_topic(db, make_topic(subtopics=[
        SubtopicIn(id="st2", title="PPE Guidelines"),
        SubtopicIn(id="st3", title="Fire Drill"),
    ]))

    assert [s.id for s in topic.subtopics] == ["st2", "st3"]
    assert await count(db, Comment) == 0

    result = await db.execute(select(UserProgress.subtopic_id))
    assert result.scalars().all() == ["st2"]


@pytest.mark.asyncio
async def test_surviving_subtopic_keeps_progress(db, employee):
    await topic_service.replace_topic(db, make_topic())
    await upsert_progress(db, "u2", "st1", ProgressStatus.fully_understood)

    await topic_service.replace_topic(db, make_topic(title="Safety (updated)"))

    row = await db.get(UserProgress, ("u2", "st1"))
    assert row is not None
    assert row.status == ProgressStatus.fully_understood


@pytest.mark.asyncio
async def test_comments_missing_from_payload_are_dropped(db, employee):
    await topic_service.replace_topic(db, make_topic())
    await topic_service.append_comment(db, "st1", CommentIn(id="c2", user_id="u2", text="second"))

    # A client holding a stale copy (without c2) saves the topic
    topic = await topic_service.replace_topic(db, make_topic())

    assert [c.id for c in topic.subtopics[0].comments] == ["c1"]
    assert await count(db, Comment) == 1


@pytest.mark.asyncio
async def test_comments_come_back_newest_first(db, employee):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    await topic_service.replace_topic(db, make_topic(subtopics=[
        SubtopicIn(id="st1", title="Emergency Procedures", comments=[
            CommentIn(id="old", user_id="u2", text="old", timestamp=base),
            CommentIn(id="new", user_id="u2", text="new", timestamp=base + timedelta(hours=1)),
        ]),
    ]))

    topic = await topic_service.get_topic(db, "t1")
    assert [c.id for c in topic.subtopics[0].comments] == ["new", "old"]


@pytest.mark.asyncio
async def test_failed_save_leaves_previous_subtree(db, session_factory, employee):
    await topic_service.replace_topic(db, make_topic())

    # Unknown comment author violates the users foreign key at commit,
    # after the stale subtopic has already been deleted in the transaction
    broken = make_topic(
        title="Broken",
        subtopics=[SubtopicIn(id="st1", title="Emergency", comments=[CommentIn(id="c9", user_id="ghost")])],
    )
    with pytest.raises(Exception):
        await topic_service.replace_topic(db, broken)

    async with session_factory() as fresh:
        topic = await topic_service.get_topic(fresh, "t1")
        assert topic.title == "Safety First"
        assert [s.id for s in topic.subtopics] == ["st1", "st2"]
        assert [c.id for c in topic.subtopics[0].comments] == ["c1"]


@pytest.mark.asyncio
async def test_failure_while_rebuilding_rolls_back(db, session_factory, employee, monkeypatch):
    await topic_service.replace_topic(db, make_topic())

    def explode(subtopic_id, comment):
        raise RuntimeError("store went away")

    monkeypatch.setattr(topic_service, "_build_comment", explode)
    with pytest.raises(RuntimeError):
        await topic_service.replace_topic(db, make_topic(subtopics=[make_topic().subtopics[0]]))

    async with session_factory() as fresh:
        topic = await topic_service.get_topic(fresh, "t1")
        assert [s.id for s in topic.subtopics] == ["st1", "st2"]
        assert await count(fresh, Comment) == 1


@pytest.mark.asyncio
async def test_duplicate_subtopic_ids_are_rejected(db, employee):
    payload = make_topic(subtopics=[
        SubtopicIn(id="st1", title="A"),
        SubtopicIn(id="st1", title="B"),
    ])
    with pytest.raises(ValueError):
        await topic_service.replace_topic(db, payload)

    assert await topic_service.get_topic(db, "t1") is None


@pytest.mark.asyncio
async def test_soft_delete_and_restore(db, employee):
    await topic_service.replace_topic(db, make_topic())
    await upsert_progress(db, "u2", "st1", ProgressStatus.good)

    assert await topic_service.soft_delete_topic(db, "t1") is True

    everything = await topic_service.list_topics(db)
    assert [(t.id, t.is_deleted) for t in everything] == [("t1", True)]
    assert await topic_service.list_topics(db, include_deleted=False) == []
    # Children are untouched by the soft delete
    assert len(everything[0].subtopics) == 2
    assert await count(db, UserProgress) == 1

    assert await topic_service.restore_topic(db, "t1") is True
    topic = await topic_service.get_topic(db, "t1")
    assert topic.is_deleted is False
    assert [c.id for c in topic.subtopics[0].comments] == ["c1"]


@pytest.mark.asyncio
async def test_soft_delete_unknown_topic_reports_missing(db):
    assert await topic_service.soft_delete_topic(db, "nope") is False
    assert await topic_service.restore_topic(db, "nope") is False


@pytest.mark.asyncio
async def test_offset_timestamps_keep_their_instant(db, session_factory, employee):
    offset = datetime(2024, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    await topic_service.replace_topic(db, make_topic(subtopics=[
        SubtopicIn(id="st1", title="Emergency Procedures", comments=[
            CommentIn(id="older", user_id="u2", text="08:00 UTC", timestamp=offset),
            CommentIn(id="newer", user_id="u2", text="09:30 UTC", timestamp="2024-01-01T09:30:00Z"),
        ]),
    ]))

    async with session_factory() as fresh:
        topic = await topic_service.get_topic(fresh, "t1")
        comments = topic.subtopics[0].comments
        assert [c.id for c in comments] == ["newer", "older"]

        stored = TopicOut.model_validate(topic).subtopics[0].comments[1]
        assert stored.timestamp == offset
        assert stored.timestamp.utcoffset() == timedelta(0)


@pytest.mark.asyncio
async def test_failed_reread_still_returns_saved_subtree(db, session_factory, employee, monkeypatch):
    async def unavailable(db, topic_id):
        raise RuntimeError("read replica down")

    monkeypatch.setattr(topic_service, "get_topic", unavailable)
    payload = make_topic(subtopics=[
        SubtopicIn(title="Generated", comments=[
            CommentIn(id="a", user_id="u2", timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc)),
            CommentIn(id="b", user_id="u2", timestamp=datetime(2024, 1, 2, tzinfo=timezone.utc)),
        ]),
    ])
    saved = await topic_service.replace_topic(db, payload)

    assert saved.id == "t1"
    assert saved.subtopics[0].id
    assert [c.id for c in saved.subtopics[0].comments] == ["b", "a"]

    monkeypatch.undo()
    async with session_factory() as fresh:
        topic = await topic_service.get_topic(fresh, "t1")
        assert [s.id for s in topic.subtopics] == [saved.subtopics[0].id]
