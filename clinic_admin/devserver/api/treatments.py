"""
Treatment endpoints

Treatments are never hard-deleted: DELETE marks them inactive and
PUT /{id}/activar restores them.
"""
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Body, HTTPException

from clinic_admin.devserver import storage
from clinic_admin.devserver.api.utils import to_record, validate_payload
from clinic_admin.models.schemas import Treatment

router = APIRouter(prefix="/api/tratamientos")

COLLECTION = "tratamientos"


def populate_professionals(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace doctor ids with {_id, nombre, apellido} objects, skipping unknown ids
    """
    doctors: List[Dict[str, Any]] = []
    for doctor_id in record.get("profesionalesHabilitados", []):
        user = storage.get_record("usuarios", doctor_id)
        if user:
            doctors.append({"_id": user["_id"], "nombre": user.get("nombre", ""), "apellido": user.get("apellido", "")})
    return {**record, "profesionalesHabilitados": doctors}


def _get_or_404(treatment_id: str) -> Dict[str, Any]:
    treatment = storage.get_record(COLLECTION, treatment_id)
    if not treatment:
        raise HTTPException(status_code=404, detail="Tratamiento no encontrado")
    return treatment


@router.get("")
async def list_treatments():
    return {"tratamientos": [populate_professionals(record) for record in storage.list_records(COLLECTION)]}


@router.get("/{treatment_id}")
async def get_treatment(treatment_id: str):
    return {"tratamiento": populate_professionals(_get_or_404(treatment_id))}


@router.post("")
async def create_treatment(payload: Dict[str, Any] = Body(...)):
    treatment = validate_payload(Treatment, payload)
    now = datetime.now().isoformat()
    record = storage.save_record(COLLECTION, to_record(treatment, createdAt=now, updatedAt=now))
    return {"tratamiento": populate_professionals(record)}


@router.put("/{treatment_id}")
async def update_treatment(treatment_id: str, payload: Dict[str, Any] = Body(...)):
    existing = _get_or_404(treatment_id)
    merged = {**existing, **payload}
    # An omitted template means "no consent template"
    if "consentimientoTemplate" not in payload:
        merged["consentimientoTemplate"] = None
    treatment = validate_payload(Treatment, merged)
    record = storage.save_record(
        COLLECTION,
        to_record(treatment, _id=treatment_id, createdAt=existing.get("createdAt"), updatedAt=datetime.now().isoformat()),
    )
    return {"tratamiento": populate_professionals(record)}


@router.delete("/{treatment_id}")
async def deactivate_treatment(treatment_id: str):
    existing = _get_or_404(treatment_id)
    storage.save_record(COLLECTION, {**existing, "activo": False, "updatedAt": datetime.now().isoformat()})
    return {"message": "Tratamiento desactivado correctamente"}


@router.put("/{treatment_id}/activar")
async def reactivate_treatment(treatment_id: str):
    existing = _get_or_404(treatment_id)
    storage.save_record(COLLECTION, {**existing, "activo": True, "updatedAt": datetime.now().isoformat()})
    return {"message": "Tratamiento reactivado correctamente"}
