"""
Entity list controller

Fetches a collection, keeps it as the authoritative local copy and exposes a
filtered view derived from the current FilterCriteria.
"""
import logging
from typing import Any, List, Optional, Tuple

from clinic_admin.api.resources import Resource
from clinic_admin.api.store import RemoteStore
from clinic_admin.core.errors import RemoteError
from clinic_admin.services.filters import FilterCriteria, FilterSchema, apply_filter, read_field
from clinic_admin.services.observable import BaseController

logger = logging.getLogger(__name__)


class EntityListController(BaseController):
    """
    List screen state: collection, criteria, filtered view and status

    - load(): fetch-always, keeps the previous collection on failure
    - set_filter(): synchronous recompute, no network
    - deactivate()/reactivate(): soft delete / restore, patched locally on success
    """

    def __init__(
        self,
        store: RemoteStore,
        resource: Resource,
        schema: Optional[FilterSchema] = None,
        criteria: Optional[FilterCriteria] = None,
        limit: int = 0,
        load_error: str = "Error al cargar los datos",
    ):
        super().__init__()
        self._store = store
        self._resource = resource
        self._schema = schema or FilterSchema()
        self._criteria = criteria or FilterCriteria()
        self._limit = limit
        self._show_all = False
        self._load_error = load_error
        self._collection: List[Any] = []
        self._filtered: List[Any] = []
        self._loaded = False

    @property
    def resource(self) -> Resource:
        return self._resource

    @property
    def collection(self) -> Tuple[Any, ...]:
        return tuple(self._collection)

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def filtered(self) -> Tuple[Any, ...]:
        return tuple(self._filtered)

    @property
    def visible(self) -> Tuple[Any, ...]:
        """
        Filtered view truncated to `limit` unless show_all is set
        """
        if self._limit > 0 and not self._show_all:
            return tuple(self._filtered[:self._limit])
        return tuple(self._filtered)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def is_empty(self) -> bool:
        """
        True when loaded but nothing matches: a "no results" state, not an error
        """
        return self._loaded and not self._filtered

    def _refilter(self) -> None:
        self._filtered = apply_filter(self._collection, self._schema, self._criteria)

    async def load(self) -> bool:
        token = self._begin("load", supersedes=("load",))
        if token is None:
            return False
        try:
            items = await self._store.fetch_collection(self._resource)
        except RemoteError as e:
            if not self._is_current(token):
                return False
            self._fail(e.message or self._load_error)
            self.notify()
            return False

        if not self._is_current(token):
            return False
        self._collection = list(items)
        self._loaded = True
        self._refilter()
        self._complete()
        self.notify()
        return True

    def set_filter(self, criteria: Optional[FilterCriteria] = None, search: Optional[str] = None, **facets: Any) -> None:
        """
        Replace the criteria, or change only the given parts of it

        Raises KeyError for a facet the schema does not declare; the current
        criteria and filtered view are kept in that case.
        """
        if criteria is None:
            criteria = self._criteria.with_changes(search, **facets)
        filtered = apply_filter(self._collection, self._schema, criteria)
        self._criteria = criteria
        self._filtered = filtered
        self.notify()

    def set_show_all(self, show_all: bool) -> None:
        self._show_all = show_all
        self.notify()

    def find(self, entity_id: str) -> Optional[Any]:
        for entity in self._collection:
            if read_field(entity, "id") == entity_id:
                return entity
        return None

    def _patch_active(self, entity_id: str, active: bool) -> None:
        field_name = self._resource.active_field
        self._collection = [
            entity.model_copy(update={field_name: active}) if read_field(entity, "id") == entity_id else entity
            for entity in self._collection
        ]
        self._refilter()

    async def _set_active(self, entity_id: str, active: bool, success: str, failure: str) -> bool:
        if not self._resource.active_field:
            raise ValueError(f"{self._resource.name} has no active flag")
        token = self._begin("reactivate" if active else "deactivate")
        if token is None:
            return False
        try:
            if active:
                await self._store.reactivate(self._resource, entity_id)
            else:
                await self._store.deactivate(self._resource, entity_id)
        except RemoteError as e:
            if not self._is_current(token):
                return False
            self._fail(e.message or failure)
            self.notify()
            return False

        if not self._is_current(token):
            return False
        self._patch_active(entity_id, active)
        self._succeed(success)
        self.notify()
        return True

    async def deactivate(self, entity_id: str, success: str = "Registro desactivado", failure: str = "Error al desactivar") -> bool:
        return await self._set_active(entity_id, False, success, failure)

    async def reactivate(self, entity_id: str, success: str = "Registro reactivado", failure: str = "Error al reactivar") -> bool:
        return await self._set_active(entity_id, True, success, failure)
