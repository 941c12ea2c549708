"""
Utility functions for dev server endpoints
"""
from typing import Any, Dict, Type

from fastapi import HTTPException
from pydantic import BaseModel, ValidationError


def validate_payload(model: Type[BaseModel], payload: Dict[str, Any]) -> BaseModel:
    """
    Validate a request body against a model

    Raises HTTPException with 422 status and a readable message for the first
    failing field, so clients can show it verbatim.
    """
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise HTTPException(status_code=422, detail=f"{location}: {first.get('msg')}")


def to_record(model: BaseModel, **extra: Any) -> Dict[str, Any]:
    """
    Dump a model in wire shape, without the `_id` key (storage assigns it)
    """
    record = model.model_dump(by_alias=True, exclude={"id"})
    record.update(extra)
    return record
