"""
infinitytrain/routes/auth.py
Email-only login and employee signup

There is no password, token or session: the caller keeps the returned user
and re-asserts its id on later requests.
"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from infinitytrain.config import settings
from infinitytrain.database import get_db
from infinitytrain.errors import ErrorCode, log_and_raise_internal, raise_bad_request, raise_not_found
from infinitytrain.orm.user import UserRole
from infinitytrain.rate_limit import limiter
from infinitytrain.schemas.user import LoginRequest, SignupRequest, UserOut
from infinitytrain.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post("/login", response_model=UserOut)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(request: Request, payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Look a user up by email."""
    email = (payload.email or "").strip()
    if not email:
        raise_bad_request("Email is required", code=ErrorCode.MISSING_FIELD, details={"field": "email"})

    try:
        user = await user_service.get_user_by_email(db, email)
    except Exception as e:
        log_and_raise_internal(e, "login", "Failed to login")

    if user is None:
        logger.warning(f"Login attempt for unknown email: {email}")
        raise_not_found("User", code=ErrorCode.USER_NOT_FOUND)

    logger.info(f"User {user.id} logged in")
    return user


@router.post("/signup", response_model=UserOut)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def signup(request: Request, payload: SignupRequest, db: AsyncSession = Depends(get_db)):
    """
    Create an employee account.

    The role in the body is ignored. When no avatar is given one is
    generated from the name.
    """
    name = (payload.name or "").strip()
    email = (payload.email or "").strip()
    if not name or not email:
        raise_bad_request(
            "Name and email are required",
            code=ErrorCode.MISSING_FIELD,
            details={"fields": ["name", "email"]}
        )

    try:
        existing = await user_service.get_user_by_email(db, email)
    except Exception as e:
        log_and_raise_internal(e, "signup", "Failed to create user")

    if existing is not None:
        raise_bad_request("User with this email already exists", code=ErrorCode.ALREADY_EXISTS)

    try:
        return await user_service.create_user(
            db,
            name=name,
            email=email,
            role=UserRole.employee,
            avatar=payload.avatar or None
        )
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        raise_bad_request("User with this email already exists", code=ErrorCode.ALREADY_EXISTS)
    except Exception as e:
        log_and_raise_internal(e, "signup", "Failed to create user")
