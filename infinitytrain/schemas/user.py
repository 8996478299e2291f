"""
infinitytrain/schemas/user.py
Identity schemas: login, signup, sparse profile update
"""
from typing import Optional

from pydantic import Field

from infinitytrain.orm.user import UserRole
from infinitytrain.schemas.base import CamelModel


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole
    avatar: str


class LoginRequest(CamelModel):
    """
    Email-only login. email is optional here so that a missing email is
    reported as 400 by the route instead of a 422 validation error.
    """
    email: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {"email": "admin@oceaninfinity.com"}
        }


class SignupRequest(CamelModel):
    """
    New employee account. role is accepted for compatibility but ignored:
    signup always creates an employee.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {"name": "Robin", "email": "robin@oceaninfinity.com"}
        }


class UserUpdateRequest(CamelModel):
    """Fields left out (or null) are not touched."""
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=3)
    role: Optional[UserRole] = None
    avatar: Optional[str] = None
