"""
Shared fixtures: an in-memory remote store and sample clinic data
"""
import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest
from pydantic import BaseModel

from clinic_admin.api.resources import DOCTORS, DOCUMENT_TEMPLATES, PATIENTS, PROFILES, TREATMENTS, Resource
from clinic_admin.core.errors import NotFoundError, RemoteError
from clinic_admin.models.schemas import Doctor, DocumentTemplate, Patient, Treatment, UploadedAsset, UserProfile


class FakeStore:
    """
    RemoteStore double

    - `fail(op, error)` makes every call of `op` raise `error`
    - `gate(op, key)` returns an asyncio.Event the call waits on, so tests can
      control completion order (create gates inside the running loop)
    - `calls` records (op, key) for every call, in order
    """

    def __init__(self):
        self.collections: Dict[str, List[BaseModel]] = {}
        self.calls: List[Tuple[str, Optional[str]]] = []
        self.payloads: List[Dict[str, Any]] = []
        self.errors: Dict[str, RemoteError] = {}
        self.gates: Dict[Tuple[str, Optional[str]], asyncio.Event] = {}
        self._next_id = 0

    def seed(self, resource: Resource, entities: List[BaseModel]):
        self.collections[resource.name] = list(entities)

    def fail(self, op: str, error: RemoteError):
        self.errors[op] = error

    def clear_failure(self, op: str):
        self.errors.pop(op, None)

    def gate(self, op: str, key: Optional[str] = None) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[(op, key)] = event
        return event

    def count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)

    async def _enter(self, op: str, key: Optional[str]):
        self.calls.append((op, key))
        gate = self.gates.get((op, key)) or self.gates.get((op, None))
        if gate is not None:
            await gate.wait()
        if op in self.errors:
            raise self.errors[op]

    def _find(self, resource: Resource, entity_id: str) -> Optional[BaseModel]:
        for entity in self.collections.get(resource.name, []):
            if entity.id == entity_id:
                return entity
        return None

    async def fetch_collection(self, resource: Resource) -> List[BaseModel]:
        await self._enter("fetch_collection", resource.name)
        return list(self.collections.get(resource.name, []))

    async def fetch_one(self, resource: Resource, entity_id: str) -> BaseModel:
        await self._enter("fetch_one", entity_id)
        entity = self._find(resource, entity_id)
        if entity is None:
            raise NotFoundError("No encontrado")
        return entity

    async def create(self, resource: Resource, payload: Dict[str, Any]) -> BaseModel:
        await self._enter("create", resource.name)
        self.payloads.append(payload)
        self._next_id += 1
        entity = resource.model.model_validate({**payload, "_id": f"new-{self._next_id}"})
        self.collections.setdefault(resource.name, []).append(entity)
        return entity

    async def update(self, resource: Resource, entity_id: str, payload: Dict[str, Any]) -> BaseModel:
        await self._enter("update", entity_id)
        self.payloads.append(payload)
        existing = self._find(resource, entity_id)
        data = existing.model_dump(by_alias=True) if existing is not None else {}
        entity = resource.model.model_validate({**data, **payload, "_id": entity_id})
        if existing is not None:
            entities = self.collections[resource.name]
            entities[entities.index(existing)] = entity
        return entity

    async def upload_asset(self, content: bytes, kind: str, filename: str = "upload",
                           content_type: str = "application/octet-stream") -> UploadedAsset:
        await self._enter("upload_asset", kind)
        return UploadedAsset(url=f"/uploads/{filename}", tipo=kind)

    async def deactivate(self, resource: Resource, entity_id: str) -> None:
        await self._enter("deactivate", entity_id)

    async def reactivate(self, resource: Resource, entity_id: str) -> None:
        await self._enter("reactivate", entity_id)


def make_patient(patient_id: str, nombre: str, apellido: str, dni: str,
                 genero: str = "no_especificado", estado: str = "activo") -> Patient:
    return Patient.model_validate({
        "_id": patient_id,
        "nombre": nombre,
        "apellido": apellido,
        "dni": dni,
        "email": f"{nombre.lower()}@example.com",
        "telefono": "555-1234",
        "genero": genero,
        "estado": estado,
    })


@pytest.fixture
def patients() -> List[Patient]:
    return [
        make_patient("p1", "Lucía", "Fernández", "30111222", "femenino"),
        make_patient("p2", "Raúl", "Lugones", "28999111", "masculino"),
        make_patient("p3", "Pedro", "Gómez", "31555666", "masculino"),
        make_patient("p4", "Ana", "Ríos", "27123456", "femenino", "inactivo"),
        make_patient("p5", "Carla", "Suárez", "40999888", "femenino"),
    ]


@pytest.fixture
def treatments() -> List[Treatment]:
    return [
        Treatment.model_validate({"_id": "t1", "nombre": "Limpieza facial", "descripcion": "Limpieza profunda",
                                  "categoria": "estetica_general", "precio": 15000, "activo": True}),
        Treatment.model_validate({"_id": "t2", "nombre": "Toxina botulínica", "descripcion": "Arrugas de expresión",
                                  "categoria": "medicina_estetica", "precio": 90000, "requiereConsentimiento": True,
                                  "consentimientoTemplate": "tpl1",
                                  "profesionalesHabilitados": [{"_id": "d1", "nombre": "Lucía", "apellido": "Gómez"}],
                                  "activo": True}),
        Treatment.model_validate({"_id": "t3", "nombre": "Peeling químico", "descripcion": "Renovación de piel",
                                  "categoria": "medicina_estetica", "subcategoria": "facial", "precio": 30000,
                                  "activo": False}),
    ]


@pytest.fixture
def doctors() -> List[Doctor]:
    return [
        Doctor.model_validate({"_id": "d1", "nombre": "Lucía", "apellido": "Gómez", "especialidad": "Dermatología"}),
        Doctor.model_validate({"_id": "d2", "nombre": "Martín", "apellido": "Ruiz"}),
        Doctor.model_validate({"_id": "d3", "nombre": "Sofía", "apellido": "Paz"}),
    ]


@pytest.fixture
def templates() -> List[DocumentTemplate]:
    return [
        DocumentTemplate.model_validate({"_id": "tpl1", "titulo": "Consentimiento toxina", "tipo": "consentimiento"}),
        DocumentTemplate.model_validate({"_id": "tpl2", "titulo": "Indicaciones", "tipo": "indicaciones"}),
        DocumentTemplate.model_validate({"_id": "tpl3", "titulo": "Consentimiento rellenos", "tipo": "consentimiento"}),
    ]


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile.model_validate({
        "_id": "u1",
        "nombre": "Ana",
        "apellido": "Pérez",
        "email": "ana@clinica.test",
        "telefono": "555-0001",
        "roles": ["admin"],
    })


@pytest.fixture
def store(patients, treatments, doctors, templates, profile) -> FakeStore:
    fake = FakeStore()
    fake.seed(PATIENTS, patients)
    fake.seed(TREATMENTS, treatments)
    fake.seed(DOCTORS, doctors)
    fake.seed(DOCUMENT_TEMPLATES, templates)
    fake.seed(PROFILES, [profile])
    return fake
