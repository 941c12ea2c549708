"""
Patient endpoints
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException

from clinic_admin.devserver import storage
from clinic_admin.devserver.api.utils import to_record, validate_payload
from clinic_admin.models.schemas import Patient

router = APIRouter(prefix="/api/pacientes")

COLLECTION = "pacientes"


def _check_unique_dni(dni: str, exclude_id: Optional[str] = None):
    if not dni:
        return
    existing = storage.find_record(COLLECTION, "dni", dni)
    if existing and existing.get("_id") != exclude_id:
        raise HTTPException(status_code=409, detail="Ya existe un paciente con ese DNI")


@router.get("")
async def list_patients():
    return {"pacientes": storage.list_records(COLLECTION)}


@router.get("/{patient_id}")
async def get_patient(patient_id: str):
    patient = storage.get_record(COLLECTION, patient_id)
    if not patient:
        raise HTTPException(status_code=404, detail="Paciente no encontrado")
    return {"paciente": patient}


@router.post("")
async def create_patient(payload: Dict[str, Any] = Body(...)):
    """
    Create a patient

    DNI must be unique across patients (409 otherwise).
    """
    patient = validate_payload(Patient, payload)
    _check_unique_dni(patient.dni)
    record = storage.save_record(COLLECTION, to_record(patient))
    return {"paciente": record}


@router.put("/{patient_id}")
async def update_patient(patient_id: str, payload: Dict[str, Any] = Body(...)):
    """
    Update a patient, merging the provided fields over the stored record
    """
    existing = storage.get_record(COLLECTION, patient_id)
    if not existing:
        raise HTTPException(status_code=404, detail="Paciente no encontrado")

    merged = {**existing, **payload}
    patient = validate_payload(Patient, merged)
    _check_unique_dni(patient.dni, exclude_id=patient_id)
    record = storage.save_record(COLLECTION, to_record(patient, _id=patient_id))
    return {"paciente": record}
