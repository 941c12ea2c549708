"""
Clinic data models

- Parsed at the API boundary so business logic only sees typed entities
- Wire names follow the clinic API (Spanish camelCase, Mongo-style `_id`)
- Python attributes are snake_case; aliases map them to the wire names
- Drafts are dicts keyed by the Python attribute names
"""
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClinicModel(BaseModel):
    """
    Common config: accept both wire and Python names, ignore unknown keys
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Address(ClinicModel):
    calle: str                   = Field("", description="Street")
    numero: str                  = Field("", description="Street number")
    piso: Optional[str]          = Field("", description="Floor")
    depto: Optional[str]         = Field("", description="Apartment")
    codigo_postal: str           = Field("", alias="codigoPostal", description="Postal code")
    ciudad: str                  = Field("", description="City")
    provincia: str               = Field("", description="Province")
    pais: str                    = Field("Argentina", description="Country")


class EmergencyContact(ClinicModel):
    nombre: str                  = Field("", description="Contact name")
    relacion: str                = Field("", description="Relationship to the patient")
    telefono: str                = Field("", description="Contact phone")


class PatientPreferences(ClinicModel):
    recibir_recordatorios_email: bool = Field(True,  alias="recibirRecordatoriosEmail")
    recibir_recordatorios_sms: bool   = Field(False, alias="recibirRecordatoriosSMS")
    permitir_fotos: bool              = Field(True,  alias="permitirFotos")


class Patient(ClinicModel):
    """
    Patient record as returned by /api/pacientes
    """
    id: Optional[str]                       = Field(None, alias="_id", description="Server-assigned identifier")
    nombre: str                             = Field(...,  description="First name")
    apellido: str                           = Field(...,  description="Last name")
    dni: str                                = Field("",   description="National identity document number")
    email: str                              = Field("",   description="Email address")
    telefono: str                           = Field("",   description="Phone number")
    fecha_nacimiento: str                   = Field("",   alias="fechaNacimiento", description="Date of birth (YYYY-MM-DD)")
    genero: Literal["masculino", "femenino", "otro", "no_especificado"] = Field("no_especificado")
    estado: Literal["activo", "inactivo"]   = Field("activo", description="Record status")
    direccion: Address                      = Field(default_factory=Address)
    grupo_sanguineo: str                    = Field("", alias="grupoSanguineo")
    alergias: List[str]                     = Field(default_factory=list)
    condiciones_medicas: List[str]          = Field(default_factory=list, alias="condicionesMedicas")
    medicacion_actual: List[str]            = Field(default_factory=list, alias="medicacionActual")
    contacto_emergencia: EmergencyContact   = Field(default_factory=EmergencyContact, alias="contactoEmergencia")
    preferencias: PatientPreferences        = Field(default_factory=PatientPreferences)
    ultima_visita: Optional[str]            = Field(None, alias="ultimaVisita", description="Last visit timestamp (read-only)")
    proxima_cita: Optional[str]             = Field(None, alias="proximaCita", description="Next appointment timestamp (read-only)")

    @field_validator("fecha_nacimiento", mode="before")
    @classmethod
    def normalize_fecha_nacimiento(cls, value: Any) -> Any:
        # Server sends full ISO timestamps, forms work with the date part
        if isinstance(value, str) and "T" in value:
            return value.split("T")[0]
        return value if value is not None else ""

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}".strip()


class Treatment(ClinicModel):
    """
    Treatment catalog entry as returned by /api/tratamientos
    """
    id: Optional[str]                              = Field(None, alias="_id", description="Server-assigned identifier")
    nombre: str                                    = Field(..., description="Treatment name")
    descripcion: str                               = Field("", description="Long description")
    categoria: Literal["estetica_general", "medicina_estetica"] = Field("estetica_general")
    subcategoria: str                              = Field("")
    precio: float                                  = Field(0, description="Price in ARS")
    duracion_estimada: int                         = Field(60, alias="duracionEstimada", description="Estimated duration in minutes")
    requiere_consulta: bool                        = Field(False, alias="requiereConsulta")
    requiere_consentimiento: bool                  = Field(False, alias="requiereConsentimiento")
    consentimiento_template: Optional[str]         = Field(None, alias="consentimientoTemplate", description="Consent template id")
    profesionales_habilitados: List[str]           = Field(default_factory=list, alias="profesionalesHabilitados", description="Enabled doctor ids")
    activo: bool                                   = Field(True)
    created_at: Optional[str]                      = Field(None, alias="createdAt")
    updated_at: Optional[str]                      = Field(None, alias="updatedAt")

    @field_validator("profesionales_habilitados", mode="before")
    @classmethod
    def collapse_populated_doctors(cls, value: Any) -> Any:
        # The list endpoint populates doctors as objects, forms only keep ids
        if isinstance(value, list):
            return [item.get("_id") or item.get("id") if isinstance(item, dict) else item for item in value]
        return value


class UserProfile(ClinicModel):
    """
    Staff user profile as returned by /api/usuarios/{id}/perfil
    """
    id: Optional[str]             = Field(None, alias="_id")
    nombre: str                   = Field(...)
    apellido: str                 = Field(...)
    email: str                    = Field(...)
    telefono: str                 = Field("")
    especialidad: Optional[str]   = Field(None)
    biografia: Optional[str]      = Field(None)
    foto_perfil: Optional[str]    = Field(None, alias="fotoPerfil", description="Profile photo URL")
    roles: List[str]              = Field(default_factory=list)
    ultimo_acceso: Optional[str]  = Field(None, alias="ultimoAcceso")


class Doctor(ClinicModel):
    id: str                       = Field(..., alias="_id")
    nombre: str                   = Field(...)
    apellido: str                 = Field(...)
    especialidad: Optional[str]   = Field(None)

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}".strip()


class DocumentTemplate(ClinicModel):
    id: str                       = Field(..., alias="_id")
    titulo: str                   = Field(...)
    tipo: str                     = Field(..., description="Template type, e.g. 'consentimiento'")


class UploadedAsset(ClinicModel):
    """
    Server reference for an uploaded file
    """
    url: str                      = Field(..., description="Public URL of the stored file")
    id: Optional[str]             = Field(None, alias="_id")
    tipo: Optional[str]           = Field(None, description="Upload kind, e.g. 'perfil'")


class PasswordChangeAck(ClinicModel):
    message: Optional[str]        = Field(None)
