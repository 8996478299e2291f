"""
infinitytrain/routes/__init__.py
Route registration - everything here is mounted under /api
"""
from fastapi import APIRouter

from infinitytrain.routes import auth, comments, progress, topics, uploads, users

router = APIRouter()

router.include_router(topics.router)
router.include_router(progress.router)
router.include_router(users.router)
router.include_router(auth.router)
router.include_router(comments.router)
router.include_router(uploads.router)
