"""API v2 router initialization."""

from fastapi import APIRouter

from app.api.v2.apps import router as apps_router
from app.api.v2.auth import router as auth_router
from app.api.v2.categories import router as categories_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Auth"])
router.include_router(apps_router, prefix="/apps", tags=["Apps"])
router.include_router(categories_router, prefix="/categories", tags=["Categories"])
