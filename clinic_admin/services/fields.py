"""
Draft field declarations and input coercion

Drafts are nested dicts; dotted names ("direccion.ciudad") address nested
values. Coercion happens at the input boundary so a draft never holds a
value of the wrong kind (no NaN, no text in numeric fields).
"""
import copy
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from clinic_admin.core.errors import FieldCoercionError

TRUE_WORDS = {"true", "1", "on", "yes", "si", "sí"}
FALSE_WORDS = {"false", "0", "off", "no", ""}


class FieldKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    CHOICE = "choice"
    LIST = "list"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind = FieldKind.TEXT
    choices: Tuple[str, ...] = ()
    read_only: bool = False
    nullable: bool = False


def field_map(specs: Sequence[FieldSpec]) -> Dict[str, FieldSpec]:
    return {spec.name: spec for spec in specs}


def _parse_number(spec: FieldSpec, raw: Any) -> float:
    if isinstance(raw, bool):
        raise FieldCoercionError("Debe ingresar un número", spec.name)
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw.strip().replace(",", "."))
        except ValueError:
            raise FieldCoercionError("Debe ingresar un número", spec.name)
    else:
        raise FieldCoercionError("Debe ingresar un número", spec.name)
    if not math.isfinite(number):
        raise FieldCoercionError("Debe ingresar un número", spec.name)
    return number


def coerce(spec: FieldSpec, raw: Any) -> Any:
    """
    Convert raw UI input into the field's declared kind

    Raises FieldCoercionError when the input cannot be represented.
    """
    if raw is None:
        if spec.nullable:
            return None
        raise FieldCoercionError("El campo no puede quedar vacío", spec.name)

    if spec.kind is FieldKind.TEXT:
        return raw if isinstance(raw, str) else str(raw)

    if spec.kind is FieldKind.NUMBER:
        number = _parse_number(spec, raw)
        return int(number) if number.is_integer() and not isinstance(raw, float) else number

    if spec.kind is FieldKind.INTEGER:
        number = _parse_number(spec, raw)
        if not number.is_integer():
            raise FieldCoercionError("Debe ingresar un número entero", spec.name)
        return int(number)

    if spec.kind is FieldKind.BOOLEAN:
        if isinstance(raw, bool):
            return raw
        word = str(raw).strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
        raise FieldCoercionError("Valor inválido", spec.name)

    if spec.kind is FieldKind.CHOICE:
        if raw not in spec.choices:
            raise FieldCoercionError("Opción inválida", spec.name)
        return raw

    if spec.kind is FieldKind.LIST:
        if isinstance(raw, str) or not isinstance(raw, (list, tuple)):
            raise FieldCoercionError("Se esperaba una lista", spec.name)
        return [str(item) for item in raw]

    raise FieldCoercionError(f"Tipo de campo desconocido: {spec.kind}", spec.name)


def get_path(draft: Mapping[str, Any], path: str) -> Any:
    value: Any = draft
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def set_path(draft: Mapping[str, Any], path: str, value: Any) -> Dict[str, Any]:
    """
    Return a copy of `draft` with `path` set, copying each level it descends
    """
    result = dict(draft)
    parts = path.split(".")
    node = result
    for part in parts[:-1]:
        child = node.get(part)
        child = dict(child) if isinstance(child, Mapping) else {}
        node[part] = child
        node = child
    node[parts[-1]] = value
    return result


def clone(draft: Mapping[str, Any]) -> Dict[str, Any]:
    return copy.deepcopy(dict(draft))


def list_value(draft: Mapping[str, Any], path: str) -> List[Any]:
    value = get_path(draft, path)
    return list(value) if isinstance(value, (list, tuple)) else []
