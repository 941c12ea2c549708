"""
Simple JSON file storage for the dev server

- One JSON file per collection under CLINIC_DATA_DIR
- Records keep the clinic API's wire shape (Mongo-style `_id`)
- Easy to point at a temporary directory in tests
"""
import json
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from clinic_admin.core import config


def data_dir() -> Path:
    path = Path(config.DATA_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def read_json(filepath: Path) -> List[Dict[str, Any]]:
    """
    Read JSON file, return empty list if not found
    """
    try:
        with open(filepath, 'r') as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return []


def write_json(filepath: Path, data: List[Dict[str, Any]]):
    """
    Write data to JSON file
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, 'w') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def collection_path(collection: str) -> Path:
    return data_dir() / f"{collection}.json"


def new_id() -> str:
    return uuid.uuid4().hex[:24]


def list_records(collection: str) -> List[Dict[str, Any]]:
    return read_json(collection_path(collection))


def get_record(collection: str, record_id: str) -> Optional[Dict[str, Any]]:
    for record in list_records(collection):
        if record.get("_id") == record_id:
            return record
    return None


def find_record(collection: str, field: str, value: Any) -> Optional[Dict[str, Any]]:
    for record in list_records(collection):
        if record.get(field) == value:
            return record
    return None


def save_record(collection: str, record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert or replace a record by `_id` (assigned when missing)
    """
    record = dict(record)
    record.setdefault("_id", new_id())
    records = list_records(collection)
    for index, existing in enumerate(records):
        if existing.get("_id") == record["_id"]:
            records[index] = record
            break
    else:
        records.append(record)
    write_json(collection_path(collection), records)
    return record


def uploads_dir() -> Path:
    path = data_dir() / "uploads"
    path.mkdir(parents=True, exist_ok=True)
    return path
