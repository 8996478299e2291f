"""
infinitytrain/services/user_service.py
Identity CRUD - lookup by id or email, signup, sparse profile updates
"""
import logging
import uuid
from dataclasses import dataclass, fields
from typing import Dict, List, Optional
from urllib.parse import quote

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.config import settings
from infinitytrain.orm.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass
class UserChanges:
    """
    Explicit sparse update: a field left as None is not touched.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    avatar: Optional[str] = None

    def values(self) -> Dict[str, object]:
        return {
            field.name: getattr(self, field.name)
            for field in fields(self)
            if getattr(self, field.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.values()


def default_avatar_url(seed: str) -> str:
    return settings.AVATAR_URL_TEMPLATE.format(seed=quote(seed, safe=""))


async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.name))
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    role: UserRole = UserRole.employee,
    avatar: Optional[str] = None,
    user_id: Optional[str] = None
) -> User:
    """
    Insert a new user. An avatar is generated from the name when none is given.

    Raises:
        IntegrityError when the email is already registered
    """
    user = User(
        id=user_id or str(uuid.uuid4()),
        name=name,
        email=email,
        role=role,
        avatar=avatar or default_avatar_url(name),
    )
    db.add(user)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"Created {role.value} user {user.id} ({email})")
    return user


async def update_user(db: AsyncSession, user_id: str, changes: UserChanges) -> Optional[User]:
    """
    Apply only the fields set in changes.

    Returns:
        The updated user, or None if the user does not exist
    """
    user = await db.get(User, user_id)
    if user is None:
        return None

    values = changes.values()
    if not values:
        return user

    for key, value in values.items():
        setattr(user, key, value)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"Updated user {user_id}: {', '.join(sorted(values))}")
    return user
