"""
Entity form controller

Holds an editable draft for one entity and drives the
load -> edit -> validate -> upload -> mutate -> reconcile cycle.

Phases:
    UNINITIALIZED -> LOADING (edit only) -> READY -> SUBMITTING -> READY
    LOADING -> NOT_FOUND | ERROR (terminal until a fresh load succeeds)
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from pydantic import BaseModel, ValidationError

from clinic_admin.api.resources import Resource
from clinic_admin.api.store import RemoteStore
from clinic_admin.core.errors import FieldCoercionError, FormValidationError, NotFoundError, RemoteError
from clinic_admin.models.status import RequestStatus
from clinic_admin.services.assets import AssetSource, AssetUpload, read_asset
from clinic_admin.services.fields import (
    FieldKind,
    FieldSpec,
    clone,
    coerce,
    field_map,
    get_path,
    list_value,
    set_path,
)
from clinic_admin.services.observable import BaseController
from clinic_admin.services.validation import Rule, ValidationResult, validate

logger = logging.getLogger(__name__)


class FormPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class FormSchema:
    """
    Everything a screen declares about its form

    - fields: editable fields and their kinds (dotted names for nested values)
    - defaults: draft used by create flows and after a successful create
    - rules: ordered validation rules, first failure wins
    - asset_field / asset_kind: optional upload bound to one draft field
    - prepare: draft -> draft hook applied before building the payload
    - payload_fields / exclude: which model fields are sent
    - payload_builder: replaces the model-based payload entirely
    """
    resource: Resource
    fields: Sequence[FieldSpec]
    defaults: Mapping[str, Any]
    rules: Sequence[Rule] = ()
    asset_field: Optional[str] = None
    asset_kind: str = "archivo"
    prepare: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None
    payload_fields: Optional[Sequence[str]] = None
    exclude: Sequence[str] = ("id",)
    payload_builder: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None
    reset_after_update: bool = False
    created_message: str = "Registro creado con éxito"
    updated_message: str = "Registro actualizado con éxito"
    load_error: str = "Error al cargar los datos"
    not_found_message: str = "No se encontró el registro solicitado"
    save_error: str = "Error al guardar"

    def default_draft(self) -> Dict[str, Any]:
        return clone(self.defaults)

    def draft_from(self, entity: BaseModel) -> Dict[str, Any]:
        return entity.model_dump(exclude={"id"})

    def build_payload(self, draft: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate the draft against the resource model and dump wire names

        Raises pydantic.ValidationError when the draft does not fit the model.
        """
        if self.prepare is not None:
            draft = self.prepare(clone(draft))
        if self.payload_builder is not None:
            return self.payload_builder(draft)
        model = self.resource.model.model_validate(draft)
        include = set(self.payload_fields) if self.payload_fields else None
        return model.model_dump(by_alias=True, include=include, exclude=set(self.exclude), exclude_none=True)


def describe_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


class EntityFormController(BaseController):
    """
    Form screen state: draft, field errors, pending asset and status
    """

    def __init__(self, store: RemoteStore, schema: FormSchema):
        super().__init__()
        self._store = store
        self._schema = schema
        self._fields = field_map(schema.fields)
        self._phase = FormPhase.UNINITIALIZED
        self._draft: Dict[str, Any] = {}
        self._entity: Optional[BaseModel] = None
        self._entity_id: Optional[str] = None
        self._field_errors: Dict[str, str] = {}
        self._validation_error: Optional[str] = None
        self._asset: Optional[AssetUpload] = None
        self._asset_token = 0
        self._preview: Optional[str] = None

    @property
    def schema(self) -> FormSchema:
        return self._schema

    @property
    def phase(self) -> FormPhase:
        return self._phase

    @property
    def draft(self) -> Dict[str, Any]:
        return clone(self._draft)

    @property
    def entity(self) -> Optional[BaseModel]:
        """Last entity received from the server"""
        return self._entity

    @property
    def entity_id(self) -> Optional[str]:
        return self._entity_id

    @property
    def is_editing(self) -> bool:
        return self._entity_id is not None

    @property
    def editable(self) -> bool:
        return self._phase is FormPhase.READY

    @property
    def field_errors(self) -> Dict[str, str]:
        return dict(self._field_errors)

    @property
    def validation_error(self) -> Optional[str]:
        return self._validation_error

    @property
    def pending_asset(self) -> Optional[AssetUpload]:
        return self._asset

    @property
    def preview(self) -> Optional[str]:
        """Data URL of a pending asset, or the stored asset URL"""
        return self._preview

    def value(self, name: str) -> Any:
        return get_path(self._draft, name)

    # ----- Lifecycle -----
    def _adopt(self, entity: BaseModel) -> None:
        self._entity = entity
        self._draft = self._schema.draft_from(entity)
        self._preview = get_path(self._draft, self._schema.asset_field) or None if self._schema.asset_field else None

    def _clear_edit_state(self) -> None:
        self._field_errors = {}
        self._validation_error = None
        self._asset = None
        self._asset_token += 1
        self._preview = None

    def start(self, entity_id: Optional[str] = None, draft: Optional[Mapping[str, Any]] = None) -> bool:
        """
        Enter READY without fetching

        With no `entity_id` this is a create flow on the default draft. An
        in-flight load is abandoned; an in-flight submit rejects the call.
        """
        if self._closed:
            return False
        if self._status.is_loading:
            if self._operation != "load":
                logger.info(f"Rejected start: {self._operation} already in progress")
                return False
            self._token += 1
            self._complete()
        else:
            self._status = RequestStatus.idle()
        self._clear_edit_state()
        self._entity = None
        self._entity_id = entity_id
        self._draft = clone(draft) if draft is not None else self._schema.default_draft()
        self._phase = FormPhase.READY
        self.notify()
        return True

    def start_create(self) -> bool:
        return self.start()

    async def load_for_edit(self, entity_id: str) -> bool:
        """
        Fetch one entity and make it the draft

        A later call supersedes an earlier one still in flight; the earlier
        response is discarded whenever it arrives.
        """
        token = self._begin("load", supersedes=("load",))
        if token is None:
            return False
        self._phase = FormPhase.LOADING
        self._entity_id = entity_id
        self._clear_edit_state()
        self.notify()

        try:
            entity = await self._store.fetch_one(self._schema.resource, entity_id)
        except NotFoundError as e:
            if not self._is_current(token):
                return False
            self._phase = FormPhase.NOT_FOUND
            self._entity = None
            self._draft = {}
            self._fail(e.message or self._schema.not_found_message)
            self.notify()
            return False
        except RemoteError as e:
            if not self._is_current(token):
                return False
            self._phase = FormPhase.ERROR
            self._entity = None
            self._draft = {}
            self._fail(e.message or self._schema.load_error)
            self.notify()
            return False

        if not self._is_current(token):
            return False
        self._adopt(entity)
        self._phase = FormPhase.READY
        self._complete()
        self.notify()
        return True

    # ----- Draft edits -----
    def _field_spec(self, name: str) -> Optional[FieldSpec]:
        spec = self._fields.get(name)
        if spec is None:
            self._field_errors[name] = "Campo desconocido"
        elif spec.read_only:
            self._field_errors[name] = "El campo no se puede modificar"
            spec = None
        return spec

    def update_field(self, name: str, value: Any) -> bool:
        """
        Coerce and store one field; invalid input leaves the draft unchanged
        """
        if not self.editable:
            return False
        spec = self._field_spec(name)
        if spec is None:
            self.notify()
            return False
        try:
            coerced = coerce(spec, value)
        except FieldCoercionError as e:
            self._field_errors[name] = e.message
            self.notify()
            return False
        self._field_errors.pop(name, None)
        self._draft = set_path(self._draft, name, coerced)
        self.notify()
        return True

    def append_item(self, name: str, value: Any) -> bool:
        """
        Append a trimmed, non-blank entry to a list field
        """
        if not self.editable:
            return False
        spec = self._field_spec(name)
        if spec is None or spec.kind is not FieldKind.LIST:
            self.notify()
            return False
        text = str(value or "").strip()
        if not text:
            return False
        self._draft = set_path(self._draft, name, list_value(self._draft, name) + [text])
        self.notify()
        return True

    def remove_item(self, name: str, index: int) -> bool:
        if not self.editable:
            return False
        spec = self._field_spec(name)
        if spec is None or spec.kind is not FieldKind.LIST:
            self.notify()
            return False
        items = list_value(self._draft, name)
        if not 0 <= index < len(items):
            return False
        del items[index]
        self._draft = set_path(self._draft, name, items)
        self.notify()
        return True

    def validate(self, draft: Optional[Mapping[str, Any]] = None) -> ValidationResult:
        return validate(self._draft if draft is None else draft, self._schema.rules)

    # ----- Assets -----
    async def select_asset(
        self,
        source: AssetSource,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> bool:
        """
        Read a chosen file into a pending upload and show its preview

        The file read is a suspension point; selecting again (or removing the
        asset) before it finishes discards the earlier read, and so does a
        submit that starts before it finishes.
        """
        field_name = self._schema.asset_field
        if field_name is None:
            raise ValueError(f"{self._schema.resource.name} form has no asset field")
        if not self.editable:
            return False
        self._asset_token += 1
        token = self._asset_token
        try:
            asset = await read_asset(source, self._schema.asset_kind, filename, content_type)
        except (FormValidationError, OSError) as e:
            if self._closed or token != self._asset_token:
                return False
            message = e.message if isinstance(e, FormValidationError) else "No se pudo leer el archivo"
            self._field_errors[field_name] = message
            if not self._status.is_loading:
                self._reject(message)
            self.notify()
            return False

        if self._closed or token != self._asset_token:
            return False
        if not self.editable:
            # A submit started during the read and has already taken its snapshot
            logger.info(f"Discarding asset read in phase {self._phase.value}")
            return False
        self._asset = asset
        self._preview = asset.preview
        self._field_errors.pop(field_name, None)
        self.notify()
        return True

    def remove_asset(self) -> None:
        """
        Drop the pending upload and clear the stored reference on submit
        """
        field_name = self._schema.asset_field
        if field_name is None or not self.editable:
            return
        self._asset_token += 1
        self._asset = None
        self._preview = None
        if get_path(self._draft, field_name):
            self._draft = set_path(self._draft, field_name, "")
        self.notify()

    # ----- Submission -----
    def _submit_failed(self, token: int, message: str) -> bool:
        if not self._is_current(token):
            return False
        self._phase = FormPhase.READY
        self._fail(message)
        self.notify()
        return False

    async def submit(self) -> bool:
        """
        Validate, upload the pending asset (if any), then create or update

        The mutation never runs when validation or the upload fails. On a
        failed mutation the draft stays as the user left it.
        """
        if self._phase is not FormPhase.READY or self._status.is_loading or self._closed:
            logger.info(f"Rejected submit in phase {self._phase.value}")
            return False

        result = self.validate()
        if not result.ok:
            self._validation_error = result.message
            self._reject(result.message)
            self.notify()
            return False
        self._validation_error = None

        token = self._begin("submit")
        if token is None:
            return False
        self._phase = FormPhase.SUBMITTING
        self.notify()

        schema = self._schema
        draft = clone(self._draft)
        asset = self._asset
        if asset is not None:
            if asset.reference is None:
                try:
                    uploaded = await self._store.upload_asset(
                        asset.content, asset.kind, asset.filename, asset.content_type
                    )
                except RemoteError as e:
                    return self._submit_failed(token, e.message or schema.save_error)
                if not self._is_current(token):
                    return False
                asset.reference = uploaded.url
            draft = set_path(draft, schema.asset_field, asset.reference)

        try:
            payload = schema.build_payload(draft)
        except ValidationError as e:
            return self._submit_failed(token, describe_validation_error(e))

        creating = self._entity_id is None
        try:
            if creating:
                entity = await self._store.create(schema.resource, payload)
            else:
                entity = await self._store.update(schema.resource, self._entity_id, payload)
        except RemoteError as e:
            return self._submit_failed(token, e.message or schema.save_error)

        if not self._is_current(token):
            return False

        self._asset = None
        self._field_errors = {}
        if creating or schema.reset_after_update:
            self._entity = entity if not creating else None
            self._draft = schema.default_draft()
            self._preview = None
        else:
            self._adopt(entity)
        self._phase = FormPhase.READY
        self._succeed(schema.created_message if creating else schema.updated_message)
        self.notify()
        return True

    def dismiss(self) -> None:
        if self._status.is_loading or self._status.is_idle:
            return
        self._validation_error = None
        super().dismiss()
