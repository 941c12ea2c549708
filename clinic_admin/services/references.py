"""
Related entity references (e.g. doctors enabled for a treatment)

A ReferenceSet holds selected ids against a separately fetched catalog and
derives two views that always partition the catalog:

- available: catalog entries not selected
- assigned: catalog entries selected

Ids that no longer resolve against the catalog stay in the selection (the
user never removed them) but are hidden from both views.
"""
from typing import Any, Iterable, List, Sequence, Tuple

from clinic_admin.services.filters import read_field
from clinic_admin.services.observable import Observable


class ReferenceSet(Observable):

    def __init__(self, catalog: Sequence[Any] = (), selected: Iterable[str] = (), id_field: str = "id"):
        super().__init__()
        self._id_field = id_field
        self._catalog: List[Any] = list(catalog)
        self._selected: List[str] = []
        for entity_id in selected:
            if entity_id not in self._selected:
                self._selected.append(entity_id)
        self._recompute()

    def _id_of(self, entity: Any) -> str:
        return read_field(entity, self._id_field)

    def _recompute(self) -> None:
        chosen = set(self._selected)
        self._available = [entity for entity in self._catalog if self._id_of(entity) not in chosen]
        self._assigned = [entity for entity in self._catalog if self._id_of(entity) in chosen]

    @property
    def catalog(self) -> Tuple[Any, ...]:
        return tuple(self._catalog)

    @property
    def selected(self) -> Tuple[str, ...]:
        return tuple(self._selected)

    @property
    def available(self) -> Tuple[Any, ...]:
        return tuple(self._available)

    @property
    def assigned(self) -> Tuple[Any, ...]:
        return tuple(self._assigned)

    @property
    def stale(self) -> Tuple[str, ...]:
        known = {self._id_of(entity) for entity in self._catalog}
        return tuple(entity_id for entity_id in self._selected if entity_id not in known)

    def contains(self, entity_id: str) -> bool:
        return any(self._id_of(entity) == entity_id for entity in self._catalog)

    def set_catalog(self, catalog: Sequence[Any]) -> None:
        self._catalog = list(catalog)
        self._recompute()
        self.notify()

    def reset(self, selected: Iterable[str]) -> None:
        """
        Replace the selection wholesale (a draft was loaded or reset)
        """
        self._selected = []
        for entity_id in selected:
            if entity_id not in self._selected:
                self._selected.append(entity_id)
        self._recompute()
        self.notify()

    def add(self, entity_id: str) -> bool:
        """
        Select an id; no-op if already selected or not in the catalog
        """
        if not entity_id or entity_id in self._selected or not self.contains(entity_id):
            return False
        self._selected.append(entity_id)
        self._recompute()
        self.notify()
        return True

    def remove(self, entity_id: str) -> bool:
        if entity_id not in self._selected:
            return False
        self._selected.remove(entity_id)
        self._recompute()
        self.notify()
        return True
