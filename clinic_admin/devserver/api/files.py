"""
File upload endpoints
"""
from pathlib import Path

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from clinic_admin.core import config
from clinic_admin.devserver import storage

router = APIRouter()

ALLOWED_EXTENSIONS = {'.pdf', '.jpg', '.jpeg', '.png', '.gif', '.webp'}


@router.post("/api/archivos/upload")
async def upload_file(
    file: UploadFile = File(...),
    tipo: str = Form("otro"),
):
    """
    Store an uploaded file and return its public reference

    Accepts PDF or image files up to the configured size limit.
    """
    # Validate file type
    file_extension = Path(file.filename).suffix.lower() if file.filename else ''
    if file_extension not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Tipo de archivo no permitido. Formatos aceptados: JPG, PNG, GIF, WEBP, PDF"
        )

    content = await file.read()
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"El archivo supera el tamaño máximo de {config.MAX_UPLOAD_MB}MB"
        )

    # Generate unique filename to avoid conflicts
    file_id = storage.new_id()
    stored_name = f"{file_id}{file_extension}"
    (storage.uploads_dir() / stored_name).write_bytes(content)

    record = storage.save_record("archivos", {
        "_id": file_id,
        "nombre": file.filename,
        "tipo": tipo,
        "url": f"/uploads/{stored_name}",
    })
    return {"archivo": record}


@router.get("/uploads/{stored_name}")
async def get_upload(stored_name: str):
    path = storage.uploads_dir() / Path(stored_name).name
    if not path.exists():
        raise HTTPException(status_code=404, detail="Archivo no encontrado")
    return FileResponse(path)
