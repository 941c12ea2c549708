"""
Treatment screens

- List: search by nombre, descripcion or subcategoria; filter by categoria
  and active status; optional "first N" preview
- Editor: treatment form plus the doctor catalog (enabled professionals) and
  the consent-template catalog, all fetched on every mount
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from clinic_admin.api.resources import DOCTORS, DOCUMENT_TEMPLATES, TREATMENTS
from clinic_admin.api.store import RemoteStore
from clinic_admin.models.schemas import DocumentTemplate
from clinic_admin.services.fields import FieldKind, FieldSpec
from clinic_admin.services.filters import Facet, FilterCriteria, FilterSchema
from clinic_admin.services.form_controller import EntityFormController, FormSchema
from clinic_admin.services.list_controller import EntityListController
from clinic_admin.services.references import ReferenceSet
from clinic_admin.services.validation import Positive, Required, RequiredWhen

logger = logging.getLogger(__name__)

CATEGORIAS = ("estetica_general", "medicina_estetica")

TREATMENT_FILTERS = FilterSchema(
    search_fields=("nombre", "descripcion", "subcategoria"),
    facets={
        "categoria": Facet("categoria", all_value="todas"),
        "estado": Facet("activo", all_value="todos", values={"activos": True, "inactivos": False}),
    },
)

CONSENT_FILTERS = FilterSchema(facets={"tipo": Facet("tipo")})

EMPTY_TREATMENT = {
    "nombre": "",
    "descripcion": "",
    "categoria": "estetica_general",
    "subcategoria": "",
    "precio": 0,
    "duracion_estimada": 60,
    "requiere_consulta": False,
    "requiere_consentimiento": False,
    "consentimiento_template": None,
    "profesionales_habilitados": [],
    "activo": True,
}

TREATMENT_FIELDS = [
    FieldSpec("nombre"),
    FieldSpec("descripcion"),
    FieldSpec("categoria", FieldKind.CHOICE, choices=CATEGORIAS),
    FieldSpec("subcategoria"),
    FieldSpec("precio", FieldKind.NUMBER),
    FieldSpec("duracion_estimada", FieldKind.INTEGER),
    FieldSpec("requiere_consulta", FieldKind.BOOLEAN),
    FieldSpec("requiere_consentimiento", FieldKind.BOOLEAN),
    FieldSpec("consentimiento_template", nullable=True),
    FieldSpec("profesionales_habilitados", FieldKind.LIST),
    FieldSpec("activo", FieldKind.BOOLEAN),
]

TREATMENT_RULES = [
    Required("nombre", "El nombre del tratamiento es requerido"),
    Required("categoria", "La categoría del tratamiento es requerida"),
    Positive("precio", "El precio debe ser mayor a 0"),
    Positive("duracion_estimada", "La duración estimada debe ser mayor a 0"),
    RequiredWhen(
        "consentimiento_template",
        "Debe seleccionar una plantilla de consentimiento",
        when="requiere_consentimiento",
    ),
]


def drop_unused_consent_template(draft: Dict[str, Any]) -> Dict[str, Any]:
    # The template is only sent when consent is required
    if not draft.get("requiere_consentimiento"):
        draft["consentimiento_template"] = None
    return draft


TREATMENT_FORM = FormSchema(
    resource=TREATMENTS,
    fields=TREATMENT_FIELDS,
    defaults=EMPTY_TREATMENT,
    rules=TREATMENT_RULES,
    prepare=drop_unused_consent_template,
    exclude=("id", "created_at", "updated_at"),
    created_message="Tratamiento creado con éxito",
    updated_message="Tratamiento actualizado con éxito",
    load_error="Error al cargar los datos del tratamiento",
    not_found_message="Tratamiento no encontrado",
    save_error="Error al guardar el tratamiento",
)


def treatment_list(store: RemoteStore, category: Optional[str] = None, limit: int = 0) -> EntityListController:
    """
    Treatment list, showing active treatments by default
    """
    return EntityListController(
        store,
        TREATMENTS,
        schema=TREATMENT_FILTERS,
        criteria=FilterCriteria(facets={"categoria": category or "todas", "estado": "activos"}),
        limit=limit,
        load_error="Error al cargar tratamientos",
    )


async def deactivate_treatment(treatments: EntityListController, treatment_id: str) -> bool:
    return await treatments.deactivate(
        treatment_id,
        success="Tratamiento desactivado",
        failure="Error al desactivar el tratamiento",
    )


async def reactivate_treatment(treatments: EntityListController, treatment_id: str) -> bool:
    return await treatments.reactivate(
        treatment_id,
        success="Tratamiento reactivado",
        failure="Error al reactivar el tratamiento",
    )


class TreatmentEditor:
    """
    Treatment form composed with its two catalogs

    The enabled-professionals selection lives in a ReferenceSet kept in sync
    with the draft's `profesionales_habilitados` field in both directions.
    """

    def __init__(self, store: RemoteStore):
        self.form = EntityFormController(store, TREATMENT_FORM)
        self.doctors = EntityListController(store, DOCTORS, load_error="Error al cargar médicos")
        self.templates = EntityListController(
            store,
            DOCUMENT_TEMPLATES,
            schema=CONSENT_FILTERS,
            criteria=FilterCriteria(facets={"tipo": "consentimiento"}),
            load_error="Error al cargar plantillas de documentos",
        )
        self.professionals = ReferenceSet()
        self._unsubscribers = [
            self.doctors.subscribe(self._sync_catalog),
            self.form.subscribe(self._sync_selection),
        ]

    def _sync_catalog(self, _doctors) -> None:
        if self.professionals.catalog != self.doctors.collection:
            self.professionals.set_catalog(self.doctors.collection)

    def _sync_selection(self, _form) -> None:
        selected = tuple(self.form.value("profesionales_habilitados") or ())
        if selected != self.professionals.selected:
            self.professionals.reset(selected)

    async def mount(self, treatment_id: Optional[str] = None) -> bool:
        """
        Fetch both catalogs (and the treatment when editing) concurrently
        """
        if treatment_id is None:
            self.form.start_create()
        loads = [self.doctors.load(), self.templates.load()]
        if treatment_id is not None:
            loads.append(self.form.load_for_edit(treatment_id))
        results = await asyncio.gather(*loads)
        return all(results)

    def add_professional(self, doctor_id: str) -> bool:
        if not self.form.editable or not self.professionals.add(doctor_id):
            return False
        return self.form.update_field("profesionales_habilitados", list(self.professionals.selected))

    def remove_professional(self, doctor_id: str) -> bool:
        if not self.form.editable or not self.professionals.remove(doctor_id):
            return False
        return self.form.update_field("profesionales_habilitados", list(self.professionals.selected))

    @property
    def consent_templates(self) -> Tuple[DocumentTemplate, ...]:
        return self.templates.filtered

    @property
    def selected_template(self) -> Optional[DocumentTemplate]:
        template_id = self.form.value("consentimiento_template")
        for template in self.templates.filtered:
            if template.id == template_id:
                return template
        return None

    def select_template(self, template_id: Optional[str]) -> bool:
        """
        Choose the consent template; only catalog ids are accepted
        """
        if template_id and not any(template.id == template_id for template in self.templates.filtered):
            logger.info(f"Ignoring unknown consent template {template_id}")
            return False
        return self.form.update_field("consentimiento_template", template_id or None)

    async def submit(self) -> bool:
        return await self.form.submit()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self.form.close()
        self.doctors.close()
        self.templates.close()
