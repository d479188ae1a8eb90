"""
Field checks whose failures must carry more than pydantic's error list:
every missing field at once, and the allowed values for enum fields.
"""
import enum
from typing import Any, Dict, Optional, Type, TypeVar

from app.core.exceptions import InvalidChoiceError, MissingFieldsError

E = TypeVar("E", bound=enum.Enum)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(values: Dict[str, Any], extra_details: Optional[Dict[str, Any]] = None) -> None:
    """Raise MissingFieldsError naming every blank field in ``values``"""
    errors = {
        field: f"{field.replace('_', ' ').capitalize()} is required"
        for field, value in values.items()
        if is_blank(value)
    }
    if errors:
        error = MissingFieldsError(errors)
        if extra_details:
            error.details.update(extra_details)
        raise error


def parse_choice(enum_cls: Type[E], value: Any, field: str, plural: Optional[str] = None) -> E:
    """Convert ``value`` to a member of ``enum_cls`` or raise InvalidChoiceError"""
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidChoiceError(field, value, [member.value for member in enum_cls], plural)
