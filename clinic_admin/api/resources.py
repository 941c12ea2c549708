"""
Remote resource descriptors

Each descriptor tells the store where a resource lives, which envelope key
wraps its payloads and which model parses it.
"""
from dataclasses import dataclass
from typing import Optional, Type

from pydantic import BaseModel

from clinic_admin.models.schemas import (
    Doctor,
    DocumentTemplate,
    PasswordChangeAck,
    Patient,
    Treatment,
    UserProfile,
)


@dataclass(frozen=True)
class Resource:
    name: str
    path: str
    model: Type[BaseModel]
    collection_key: Optional[str] = None
    item_key: Optional[str] = None
    item_path: Optional[str] = None
    active_field: Optional[str] = None

    def url_for(self, entity_id: str) -> str:
        if self.item_path:
            return self.item_path.format(id=entity_id)
        return f"{self.path}/{entity_id}"


PATIENTS = Resource(
    name="pacientes",
    path="/api/pacientes",
    model=Patient,
    collection_key="pacientes",
    item_key="paciente",
)

TREATMENTS = Resource(
    name="tratamientos",
    path="/api/tratamientos",
    model=Treatment,
    collection_key="tratamientos",
    item_key="tratamiento",
    active_field="activo",
)

DOCTORS = Resource(
    name="medicos",
    path="/api/usuarios/medicos",
    model=Doctor,
    collection_key="medicos",
)

DOCUMENT_TEMPLATES = Resource(
    name="templates",
    path="/api/documentos/templates",
    model=DocumentTemplate,
    collection_key="templates",
)

PROFILES = Resource(
    name="perfiles",
    path="/api/usuarios",
    model=UserProfile,
    item_key="usuario",
    item_path="/api/usuarios/{id}/perfil",
)

PASSWORDS = Resource(
    name="password",
    path="/api/usuarios",
    model=PasswordChangeAck,
    item_path="/api/usuarios/{id}/password",
)

UPLOAD_PATH = "/api/archivos/upload"
