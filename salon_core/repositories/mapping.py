# =============================================================================
# salon_core/repositories/mapping.py
# Conversion Helpers Shared by the Entity Mappers
# =============================================================================
"""
Small value converters used by the `<entity>_to_row` / `<entity>_from_row` /
`<entity>_to_document` / `<entity>_from_document` functions of each
repository module.

Local rows use snake_case columns, ISO-8601 text timestamps, 0/1 booleans and
JSON text for lists and nested maps. Documents use camelCase keys, ISO-8601
text timestamps, real booleans and nested structures.
"""

from __future__ import annotations
import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from salon_core.errors import EntityValidationError

E = TypeVar("E", bound=Enum)


def new_id() -> str:
    """Client-side UUID4 id."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def from_iso(value: Any, field: str = "timestamp") -> Optional[datetime]:
    """Parse ISO text (a trailing 'Z' is accepted) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as e:
            raise EntityValidationError(
                f"Invalid timestamp: {value!r}",
                field=field,
                expected="ISO-8601",
                actual=str(value),
            ) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def enum_name(value: Optional[Enum]) -> Optional[str]:
    return value.value if value is not None else None


def parse_enum(enum_cls: Type[E], value: Any, field: str, default: Optional[E] = None) -> E:
    """
    Convert a stored enum name back to the enum.

    Raises:
        EntityValidationError: for unknown names when no default is given
    """
    if value is None or value == "":
        if default is not None:
            return default
    try:
        return enum_cls(value)
    except ValueError as e:
        raise EntityValidationError(
            f"Unknown {enum_cls.__name__} value: {value!r}",
            field=field,
            expected=" | ".join(m.value for m in enum_cls),
            actual=str(value),
        ) from e


def to_flag(value: Any) -> int:
    return 1 if value else 0


def from_flag(value: Any) -> bool:
    return bool(value)


def dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def loads(value: Any, field: str) -> Any:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise EntityValidationError(f"Invalid JSON in {field}", field=field, actual=value) from e


def require(document: Dict[str, Any], key: str) -> Any:
    """Fetch a mandatory document key."""
    if key not in document or document[key] in (None, ""):
        raise EntityValidationError(f"Document is missing '{key}'", field=key)
    return document[key]


def as_float(value: Any, field: str) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise EntityValidationError(f"Invalid number for {field}: {value!r}", field=field, expected="float") from e


def string_list(value: Any) -> List[str]:
    return [str(item) for item in (value or [])]
