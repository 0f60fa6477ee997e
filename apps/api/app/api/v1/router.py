from fastapi import APIRouter

from app.api.v1.admin_prayers import router as admin_prayers_router
from app.api.v1.auth import router as auth_router
from app.api.v1.prayers import router as prayers_router
from app.api.v1.registrations import router as registrations_router

router = APIRouter()
router.include_router(prayers_router)
router.include_router(registrations_router)
router.include_router(auth_router)
router.include_router(admin_prayers_router)
