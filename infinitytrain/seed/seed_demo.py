"""
infinitytrain/seed/seed_demo.py
Seed the demo roster and training topics (only into an empty database)

Run standalone: python -m infinitytrain.seed.seed_demo
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.database import AsyncSessionLocal, init_db, is_empty
from infinitytrain.orm.user import User, UserRole
from infinitytrain.schemas.topic import SubtopicIn, TopicIn
from infinitytrain.services.topic_service import replace_topic
from infinitytrain.services.user_service import default_avatar_url

logger = logging.getLogger(__name__)


DEMO_USERS = [
    {"id": "u1", "name": "Admin", "email": "admin@oceaninfinity.com", "role": UserRole.admin},
    {"id": "u2", "name": "May", "email": "May-Marie.Mawili@oceaninfinity.com", "role": UserRole.employee},
    {"id": "u3", "name": "Adam", "email": "adam.lundquist@oceaninfinity.com", "role": UserRole.employee},
    {"id": "u4", "name": "Chris", "email": "christoph.leitner@oceaninfinity.com", "role": UserRole.employee},
    {"id": "u5", "name": "Arta", "email": "Arta.Zena@oceaninfinity.com", "role": UserRole.employee},
    {"id": "u6", "name": "Enya", "email": "Enya.Tufvesson@oceaninfinity.com", "role": UserRole.employee},
]

DEMO_TOPICS = [
    {
        "id": "t1",
        "title": "Safety First",
        "icon": "ShieldCheck",
        "subtopics": [
            ("st1", "Emergency Procedures", "# Emergency Procedures\n\nIn case of emergency..."),
            ("st2", "PPE Guidelines", "# Personal Protective Equipment\n\nAlways wear..."),
        ],
    },
    {
        "id": "t2",
        "title": "Ocean Navigation",
        "icon": "Compass",
        "subtopics": [
            ("st3", "Chart Reading", "# Reading Charts\n\nKey symbols include..."),
        ],
    },
    {
        "id": "t3",
        "title": "Equipment Ops",
        "icon": "Wrench",
        "subtopics": [
            ("st4", "ROV Maintenance", "# ROV Maintenance Checklist\n\n1. Check seals..."),
        ],
    },
    {
        "id": "t4",
        "title": "Data Analysis",
        "icon": "BarChart3",
        "subtopics": [
            ("st5", "Sonar Interpretation", "# Sonar Data\n\nHow to read sonar..."),
        ],
    },
    {
        "id": "t5",
        "title": "Communication",
        "icon": "Radio",
        "subtopics": [
            ("st6", "Radio Protocols", "# Radio Etiquette\n\nOver and out."),
        ],
    },
    {
        "id": "t6",
        "title": "Environmental",
        "icon": "Leaf",
        "subtopics": [
            ("st7", "Marine Life Protection", "# Protecting Marine Life\n\nGuidelines..."),
        ],
    },
    {
        "id": "t7",
        "title": "Vessel Maintenance",
        "icon": "Ship",
        "subtopics": [
            ("st8", "Engine Checks", "# Engine Maintenance\n\nDaily checks..."),
            ("st9", "Hull Inspection", "# Hull Integrity\n\nRegular inspection..."),
        ],
    },
    {
        "id": "t8",
        "title": "Weather Systems",
        "icon": "Wind",
        "subtopics": [
            ("st10", "Storm Recognition", "# Storm Systems\n\nIdentifying threats..."),
        ],
    },
]


async def seed_demo_data(db: AsyncSession) -> bool:
    """
    Insert the demo users and topics when no user exists yet.

    Returns:
        True if the database was seeded, False if it already had users
    """
    if not await is_empty(db):
        logger.info("✓ Users already exist - skipping demo seed")
        return False

    logger.info("Seeding demo users and topics...")
    for user_data in DEMO_USERS:
        db.add(User(avatar=default_avatar_url(user_data["name"]), **user_data))
    await db.commit()

    for topic_data in DEMO_TOPICS:
        await replace_topic(
            db,
            TopicIn(
                id=topic_data["id"],
                title=topic_data["title"],
                icon=topic_data["icon"],
                subtopics=[
                    SubtopicIn(id=subtopic_id, title=title, resources=resources)
                    for subtopic_id, title, resources in topic_data["subtopics"]
                ],
            )
        )

    logger.info(f"✓ Seeded {len(DEMO_USERS)} users and {len(DEMO_TOPICS)} topics")
    return True


async def main():
    await init_db()
    async with AsyncSessionLocal() as session:
        await seed_demo_data(session)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )
    asyncio.run(main())
