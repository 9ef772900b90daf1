# schemas/common.py
from typing import Any, Dict, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


def coerce_id(value: Any) -> Any:
    """
    Ids may arrive as numbers or numeric strings; both become int here so the
    services only ever see one representation. Booleans and other types are
    rejected.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("id must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError("id must be an integer")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input too."""

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
