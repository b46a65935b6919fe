"""Booking intake: validate a booking request before it is stored."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator

from adilla.intake.common import FORM_CONFIG, as_text, collect_errors, field_error
from adilla.models import BookingPayload, IntakeResult

logger = logging.getLogger(__name__)

TEXT_RULES: dict[str, tuple[int, str]] = {
    "property_id": (1, "Property ID is required"),
    "property_name": (1, "Property name is required"),
    "user_name": (2, "User name must be at least 2 characters"),
    "user_phone": (5, "Phone number must be at least 5 characters"),
}


class BookingForm(BaseModel):
    model_config = FORM_CONFIG

    property_id: str = ""
    property_name: str = ""
    user_name: str = ""
    user_phone: str = ""

    @field_validator("property_id", "property_name", "user_name", "user_phone", mode="before")
    @classmethod
    def _check_text(cls, value: Any, info: ValidationInfo) -> str:
        text = as_text(value)
        minimum, message = TEXT_RULES[info.field_name]
        if len(text) < minimum:
            raise field_error(message)
        return text


def validate(raw: Mapping[str, Any]) -> IntakeResult[BookingPayload]:
    """Validate a raw booking request, collecting every failing field."""
    try:
        form = BookingForm.model_validate(dict(raw))
    except ValidationError as exc:
        errors = collect_errors(exc, BookingForm)
        logger.info("Booking rejected, invalid fields: %s", ", ".join(sorted(errors)))
        return IntakeResult[BookingPayload](errors=errors)
    return IntakeResult[BookingPayload](payload=BookingPayload(**form.model_dump()))
