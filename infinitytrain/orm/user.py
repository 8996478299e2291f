"""
infinitytrain/orm/user.py
User model - identity record, email is the login key
"""
from enum import Enum

from sqlalchemy import Column, String, Enum as SQLEnum

from infinitytrain.orm.base import Base


class UserRole(str, Enum):
    """User roles - administrators curate topics, employees track progress"""
    admin = "admin"
    employee = "employee"


class User(Base):
    """
    A person using the tracker.

    Created at signup, mutated by profile updates (avatar, name, ...),
    never deleted.
    """
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(
        SQLEnum(UserRole, native_enum=False, length=16),
        nullable=False,
        default=UserRole.employee
    )
    avatar = Column(String(1024), nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
