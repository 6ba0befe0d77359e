from __future__ import annotations

from typing import Any, Mapping, Optional, Type, TypeVar

import pydantic

from ..core.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=pydantic.BaseModel)


def field_errors(exc: pydantic.ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into ``[{"field", "message", "code"}]``."""
    out: list[dict[str, str]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        out.append(
            {
                "field": ".".join(loc) if loc else "__root__",
                "message": str(err.get("msg", "Invalid value")),
                "code": str(err.get("type", "invalid")),
            }
        )
    return out


def parse_input(schema: Type[SchemaT], data: Mapping[str, Any] | None) -> SchemaT:
    """Validate raw request data against a schema.

    Raises ValidationError carrying field-level messages instead of letting the
    pydantic exception escape to the caller.
    """
    try:
        return schema.model_validate(dict(data or {}))
    except pydantic.ValidationError as exc:
        errors = field_errors(exc)
        raise ValidationError("Invalid data: " + ", ".join(e["field"] for e in errors), errors=errors) from exc


def optional_int(value: Any) -> Optional[int]:
    """Best-effort int for building access contexts from raw request data."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
