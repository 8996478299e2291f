"""
infinitytrain/routes/users.py
User lookup and sparse profile updates
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.database import get_db
from infinitytrain.errors import ErrorCode, log_and_raise_internal, raise_bad_request, raise_not_found
from infinitytrain.schemas.user import UserOut, UserUpdateRequest
from infinitytrain.services import user_service
from infinitytrain.services.user_service import UserChanges

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserOut])
async def list_users(db: AsyncSession = Depends(get_db)):
    """Everyone, for the admin "view as" picker."""
    try:
        return await user_service.list_users(db)
    except Exception as e:
        log_and_raise_internal(e, "list_users", "Failed to fetch users")


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.get_user(db, user_id)
    except Exception as e:
        log_and_raise_internal(e, "get_user", "Failed to fetch user")

    if user is None:
        raise_not_found("User", user_id, code=ErrorCode.USER_NOT_FOUND)
    return user


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(user_id: str, payload: UserUpdateRequest, db: AsyncSession = Depends(get_db)):
    """Only the fields present in the body are changed (e.g. a new avatar)."""
    changes = UserChanges(
        name=payload.name,
        email=payload.email.strip() if payload.email else None,
        role=payload.role,
        avatar=payload.avatar,
    )

    try:
        if changes.email is not None:
            owner = await user_service.get_user_by_email(db, changes.email)
            if owner is not None and owner.id != user_id:
                raise_bad_request("User with this email already exists", code=ErrorCode.ALREADY_EXISTS)
        user = await user_service.update_user(db, user_id, changes)
    except HTTPException:
        raise
    except Exception as e:
        log_and_raise_internal(e, "update_user", "Failed to update user")

    if user is None:
        raise_not_found("User", user_id, code=ErrorCode.USER_NOT_FOUND)
    return user
