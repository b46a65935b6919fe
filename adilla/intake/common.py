"""Shared helpers for validating raw form input."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

FORM_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    validate_default=True,
    extra="ignore",
)


def field_error(message: str) -> PydanticCustomError:
    # Custom errors keep the message as-is (no "Value error, " prefix).
    return PydanticCustomError("invalid_field", message)


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def coerce_number(value: Any, label: str) -> float:
    """Coerce form input to a number the way a browser form would."""
    if isinstance(value, bool):
        raise field_error(f"{label} must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = as_text(value).strip()
        if not text:
            number = 0.0
        else:
            try:
                number = float(text)
            except ValueError:
                raise field_error(f"{label} must be a number") from None
    if math.isnan(number) or math.isinf(number):
        raise field_error(f"{label} must be a number")
    return number


def split_tags(value: Any) -> list[str]:
    """Split comma-separated text into trimmed, non-empty tags.

    Order and duplicates are kept. A list is normalised the same way.
    """
    if isinstance(value, (list, tuple)):
        parts = [as_text(item) for item in value]
    else:
        parts = as_text(value).split(",")
    return [part.strip() for part in parts if part.strip()]


def collect_errors(exc: ValidationError, form: type[BaseModel]) -> dict[str, list[str]]:
    """Flatten a pydantic error into field -> messages, keyed by wire name.

    Pydantic reports a missing field under its attribute name and a supplied
    one under whichever key the input used, so both are mapped to the alias.
    """
    aliases = {name: info.alias or name for name, info in form.model_fields.items()}
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "form"
        errors.setdefault(aliases.get(field, field), []).append(err["msg"])
    return errors
