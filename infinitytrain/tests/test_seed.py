import pytest

from infinitytrain.orm.user import UserRole
from infinitytrain.seed.seed_demo import DEMO_TOPICS, DEMO_USERS, seed_demo_data
from infinitytrain.services import topic_service, user_service


@pytest.mark.asyncio
async def test_seed_fills_empty_database(db):
    assert await seed_demo_data(db) is True

    users = await user_service.list_users(db)
    assert len(users) == len(DEMO_USERS)
    assert [u.id for u in users if u.role == UserRole.admin] == ["u1"]

    topics = await topic_service.list_topics(db)
    assert [t.id for t in topics] == [t["id"] for t in DEMO_TOPICS]
    vessel = next(t for t in topics if t.id == "t7")
    assert [s.id for s in vessel.subtopics] == ["st8", "st9"]


@pytest.mark.asyncio
async def test_seed_skips_when_users_exist(db, employee):
    assert await seed_demo_data(db) is False
    assert await topic_service.list_topics(db) == []
