"""
Staff user endpoints: doctor catalog, profiles and password changes
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException

from clinic_admin.devserver import storage
from clinic_admin.devserver.api.utils import validate_payload
from clinic_admin.devserver.seed import hash_password
from clinic_admin.models.schemas import UserProfile

router = APIRouter(prefix="/api/usuarios")

COLLECTION = "usuarios"

# Fields a user may change on their own profile
PROFILE_UPDATABLE = ("nombre", "apellido", "telefono", "especialidad", "biografia", "fotoPerfil")


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in user.items() if key != "passwordHash"}


def _get_or_404(user_id: str) -> Dict[str, Any]:
    user = storage.get_record(COLLECTION, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return user


@router.get("/medicos")
async def list_doctors():
    doctors = [
        public_user(user)
        for user in storage.list_records(COLLECTION)
        if "medico" in user.get("roles", []) and user.get("activo", True)
    ]
    return {"medicos": doctors}


@router.get("/{user_id}/perfil")
async def get_profile(user_id: str):
    return {"usuario": public_user(_get_or_404(user_id))}


@router.put("/{user_id}/perfil")
async def update_profile(user_id: str, payload: Dict[str, Any] = Body(...)):
    """
    Update profile fields; email and roles are ignored if sent
    """
    existing = _get_or_404(user_id)
    changes = {key: value for key, value in payload.items() if key in PROFILE_UPDATABLE}
    merged = {**existing, **changes}
    validate_payload(UserProfile, merged)
    record = storage.save_record(COLLECTION, merged)
    return {"usuario": public_user(record)}


@router.put("/{user_id}/password")
async def change_password(user_id: str, payload: Dict[str, Any] = Body(...)):
    existing = _get_or_404(user_id)
    current = payload.get("currentPassword") or ""
    new = payload.get("newPassword") or ""
    if hash_password(current) != existing.get("passwordHash"):
        raise HTTPException(status_code=400, detail="La contraseña actual es incorrecta")
    if len(new) < 8:
        raise HTTPException(status_code=400, detail="La nueva contraseña debe tener al menos 8 caracteres")
    storage.save_record(COLLECTION, {**existing, "passwordHash": hash_password(new)})
    return {"message": "Contraseña actualizada correctamente"}
