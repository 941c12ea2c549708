"""
Patient screens

- List: search by nombre, apellido, DNI or email; filter by estado and genero
- Form: personal data, address, medical lists, emergency contact, preferences
"""
from clinic_admin.api.resources import PATIENTS
from clinic_admin.api.store import RemoteStore
from clinic_admin.services.fields import FieldKind, FieldSpec
from clinic_admin.services.filters import Facet, FilterCriteria, FilterSchema
from clinic_admin.services.form_controller import EntityFormController, FormSchema
from clinic_admin.services.list_controller import EntityListController
from clinic_admin.services.validation import EMAIL_PATTERN, MatchesPattern, Required

GENEROS = ("masculino", "femenino", "otro", "no_especificado")

PATIENT_FILTERS = FilterSchema(
    search_fields=("nombre", "apellido", "dni", "email"),
    facets={
        "estado": Facet("estado", all_value="todos"),
        "genero": Facet("genero", all_value="todos"),
    },
)

EMPTY_PATIENT = {
    "nombre": "",
    "apellido": "",
    "email": "",
    "telefono": "",
    "dni": "",
    "fecha_nacimiento": "",
    "genero": "no_especificado",
    "direccion": {
        "calle": "",
        "numero": "",
        "piso": "",
        "depto": "",
        "codigo_postal": "",
        "ciudad": "",
        "provincia": "",
        "pais": "Argentina",
    },
    "grupo_sanguineo": "",
    "alergias": [],
    "condiciones_medicas": [],
    "medicacion_actual": [],
    "contacto_emergencia": {
        "nombre": "",
        "relacion": "",
        "telefono": "",
    },
    "preferencias": {
        "recibir_recordatorios_email": True,
        "recibir_recordatorios_sms": False,
        "permitir_fotos": True,
    },
}

PATIENT_FIELDS = [
    FieldSpec("nombre"),
    FieldSpec("apellido"),
    FieldSpec("email"),
    FieldSpec("telefono"),
    FieldSpec("dni"),
    FieldSpec("fecha_nacimiento"),
    FieldSpec("genero", FieldKind.CHOICE, choices=GENEROS),
    FieldSpec("direccion.calle"),
    FieldSpec("direccion.numero"),
    FieldSpec("direccion.piso"),
    FieldSpec("direccion.depto"),
    FieldSpec("direccion.codigo_postal"),
    FieldSpec("direccion.ciudad"),
    FieldSpec("direccion.provincia"),
    FieldSpec("direccion.pais"),
    FieldSpec("grupo_sanguineo"),
    FieldSpec("alergias", FieldKind.LIST),
    FieldSpec("condiciones_medicas", FieldKind.LIST),
    FieldSpec("medicacion_actual", FieldKind.LIST),
    FieldSpec("contacto_emergencia.nombre"),
    FieldSpec("contacto_emergencia.relacion"),
    FieldSpec("contacto_emergencia.telefono"),
    FieldSpec("preferencias.recibir_recordatorios_email", FieldKind.BOOLEAN),
    FieldSpec("preferencias.recibir_recordatorios_sms", FieldKind.BOOLEAN),
    FieldSpec("preferencias.permitir_fotos", FieldKind.BOOLEAN),
]

# Minimum requirements to create or update a patient
PATIENT_RULES = [
    Required("nombre", "El nombre es requerido"),
    Required("apellido", "El apellido es requerido"),
    Required("dni", "El DNI es requerido"),
    Required("email", "El email es requerido"),
    MatchesPattern("email", "El email no es válido", pattern=EMAIL_PATTERN),
    Required("telefono", "El teléfono es requerido"),
]

PATIENT_FORM = FormSchema(
    resource=PATIENTS,
    fields=PATIENT_FIELDS,
    defaults=EMPTY_PATIENT,
    rules=PATIENT_RULES,
    exclude=("id", "ultima_visita", "proxima_cita"),
    created_message="Paciente creado con éxito",
    updated_message="Paciente actualizado con éxito",
    load_error="Error al cargar los datos del paciente",
    not_found_message="Paciente no encontrado",
    save_error="Error al guardar el paciente",
)


def patient_list(store: RemoteStore) -> EntityListController:
    return EntityListController(
        store,
        PATIENTS,
        schema=PATIENT_FILTERS,
        criteria=FilterCriteria(facets={"estado": "todos", "genero": "todos"}),
        load_error="Error al cargar pacientes",
    )


def patient_form(store: RemoteStore) -> EntityFormController:
    return EntityFormController(store, PATIENT_FORM)
