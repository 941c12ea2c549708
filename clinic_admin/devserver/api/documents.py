"""
Document template endpoints
"""
from fastapi import APIRouter

from clinic_admin.devserver import storage

router = APIRouter(prefix="/api/documentos")


@router.get("/templates")
async def list_templates():
    return {"templates": storage.list_records("templates")}
