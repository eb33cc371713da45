"""
Safe JSON serialization utilities.

Converts enums, dataclasses, paths, pydantic models and nested containers
into JSON-compatible values for progress events.
"""

from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel


def safe_json_serialize(obj: Any) -> Any:
    """
    Recursively serialize Python objects to JSON-compatible types.

    Args:
        obj: Any Python object to serialize

    Returns:
        JSON-compatible representation of the object
    """
    if obj is None:
        return None
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, (str, int, float, bool)):
        return obj
    elif isinstance(obj, PurePath):
        return str(obj)
    elif isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    elif is_dataclass(obj) and not isinstance(obj, type):
        return safe_json_serialize(asdict(obj))
    elif isinstance(obj, dict):
        return {str(k): safe_json_serialize(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple, set, frozenset)):
        items = sorted(obj, key=str) if isinstance(obj, (set, frozenset)) else obj
        return [safe_json_serialize(item) for item in items]
    else:
        return str(obj)
