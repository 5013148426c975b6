"""
API routes aggregation.
"""

from fastapi import APIRouter

from .users import router as users_router
from .payments import router as payments_router

router = APIRouter()

router.include_router(users_router, prefix="/users", tags=["User Management"])
router.include_router(payments_router, prefix="/payments", tags=["Payment Processing"])
