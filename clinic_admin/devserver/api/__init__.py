# API routes
from fastapi import APIRouter
from clinic_admin.devserver.api.patients import router as patients_router
from clinic_admin.devserver.api.treatments import router as treatments_router
from clinic_admin.devserver.api.users import router as users_router
from clinic_admin.devserver.api.documents import router as documents_router
from clinic_admin.devserver.api.files import router as files_router

# Combine all routers
router = APIRouter()
router.include_router(patients_router)
router.include_router(treatments_router)
router.include_router(users_router)
router.include_router(documents_router)
router.include_router(files_router)

__all__ = ["router"]
