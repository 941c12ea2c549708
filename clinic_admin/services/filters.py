"""
Filter predicate composition

- Free-text search: case-insensitive substring, OR across the search fields
- Facets: exact equality on one field, skipped for "all" sentinel values
- Final predicate: AND of the text predicate and every active facet
- Filtering never reorders and never touches the network
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

ALL = "all"

Predicate = Callable[[Any], bool]


def read_field(entity: Any, path: str) -> Any:
    """
    Read a (dotted) field from a model or a mapping, None when missing
    """
    value = entity
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


@dataclass(frozen=True)
class Facet:
    """
    One enum-valued filter

    `values` translates UI choices into field values, e.g. the treatment
    status facet maps 'activos' -> True on the `activo` field. `all_value`
    is the screen's own "no constraint" label ('todos', 'todas').
    """
    field: str
    all_value: str = ALL
    values: Mapping[str, Any] = field(default_factory=dict)

    def is_unconstrained(self, value: Any) -> bool:
        return value is None or value == "" or value == ALL or value == self.all_value

    def target(self, value: Any) -> Any:
        return self.values.get(value, value) if isinstance(value, str) else value


@dataclass(frozen=True)
class FilterSchema:
    search_fields: Tuple[str, ...] = ()
    facets: Mapping[str, Facet] = field(default_factory=dict)


@dataclass(frozen=True)
class FilterCriteria:
    search: str = ""
    facets: Mapping[str, Any] = field(default_factory=dict)

    def with_changes(self, search: Optional[str] = None, **facets: Any) -> "FilterCriteria":
        merged: Dict[str, Any] = dict(self.facets)
        merged.update(facets)
        return FilterCriteria(search=self.search if search is None else search, facets=merged)


def text_predicate(term: str, fields: Sequence[str]) -> Optional[Predicate]:
    """
    Substring match on any of `fields`, None when the term is blank
    """
    needle = (term or "").strip().lower()
    if not needle:
        return None

    def matches(entity: Any) -> bool:
        for path in fields:
            value = read_field(entity, path)
            if value is not None and needle in str(value).lower():
                return True
        return False

    return matches


def facet_predicate(facet: Facet, value: Any) -> Optional[Predicate]:
    if facet.is_unconstrained(value):
        return None
    expected = facet.target(value)
    return lambda entity: read_field(entity, facet.field) == expected


def build_predicate(schema: FilterSchema, criteria: FilterCriteria) -> Predicate:
    parts: List[Predicate] = []
    text = text_predicate(criteria.search, schema.search_fields)
    if text is not None:
        parts.append(text)
    for name, value in criteria.facets.items():
        facet = schema.facets.get(name)
        if facet is None:
            raise KeyError(f"Unknown facet: {name}")
        predicate = facet_predicate(facet, value)
        if predicate is not None:
            parts.append(predicate)
    return lambda entity: all(part(entity) for part in parts)


def apply_filter(items: Iterable[Any], schema: FilterSchema, criteria: FilterCriteria) -> List[Any]:
    predicate = build_predicate(schema, criteria)
    return [item for item in items if predicate(item)]
