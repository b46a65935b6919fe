"""Listing intake: validate and normalise a submitted property form."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, ValidationError, ValidationInfo, field_validator

from adilla.intake.common import (
    FORM_CONFIG,
    as_text,
    coerce_number,
    collect_errors,
    field_error,
    split_tags,
)
from adilla.models import IntakeResult, ListingPayload

logger = logging.getLogger(__name__)

DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 1000

# field -> (minimum length, message)
TEXT_RULES: dict[str, tuple[int, str]] = {
    "name": (3, "Name must be at least 3 characters"),
    "address": (5, "Address must be at least 5 characters"),
    "property_type": (3, "Property type is required"),
    "location": (2, "Location is required"),
}

# field -> (label, strictly positive, message)
NUMBER_RULES: dict[str, tuple[str, bool, str]] = {
    "price": ("Price", True, "Price must be a positive number"),
    "bedrooms": ("Bedrooms", False, "Bedrooms cannot be negative"),
    "bathrooms": ("Bathrooms", False, "Bathrooms cannot be negative"),
    "square_footage": ("Square footage", True, "Square footage must be positive"),
}

TAG_RULES: dict[str, str] = {
    "amenities": "Please list at least one amenity",
    "unique_features": "Please list at least one unique feature",
}

_url_adapter = TypeAdapter(HttpUrl)


class ListingForm(BaseModel):
    """Raw listing form. Every field is checked, so all errors surface at once."""

    model_config = FORM_CONFIG

    name: str = ""
    address: str = ""
    property_type: str = ""
    location: str = ""
    price: float = 0
    bedrooms: float = 0
    bathrooms: float = 0
    square_footage: float = 0
    amenities: list[str] = Field(default_factory=list)
    unique_features: list[str] = Field(default_factory=list)
    description: str = ""
    image_url: str = ""

    @field_validator("name", "address", "property_type", "location", mode="before")
    @classmethod
    def _check_text(cls, value: Any, info: ValidationInfo) -> str:
        text = as_text(value)
        minimum, message = TEXT_RULES[info.field_name]
        if len(text) < minimum:
            raise field_error(message)
        return text

    @field_validator("price", "bedrooms", "bathrooms", "square_footage", mode="before")
    @classmethod
    def _check_number(cls, value: Any, info: ValidationInfo) -> float:
        label, positive, message = NUMBER_RULES[info.field_name]
        number = coerce_number(value, label)
        if (positive and number <= 0) or number < 0:
            raise field_error(message)
        return number

    @field_validator("amenities", "unique_features", mode="before")
    @classmethod
    def _check_tags(cls, value: Any, info: ValidationInfo) -> list[str]:
        tags = split_tags(value)
        if not tags:
            raise field_error(TAG_RULES[info.field_name])
        return tags

    @field_validator("description", mode="before")
    @classmethod
    def _check_description(cls, value: Any) -> str:
        text = as_text(value)
        if len(text) < DESCRIPTION_MIN_LENGTH:
            raise field_error(f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters")
        if len(text) > DESCRIPTION_MAX_LENGTH:
            raise field_error(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")
        return text

    @field_validator("image_url", mode="before")
    @classmethod
    def _check_image_url(cls, value: Any) -> str:
        text = as_text(value).strip()
        if not text:
            return ""
        try:
            _url_adapter.validate_python(text)
        except ValidationError:
            raise field_error("Image URL must be a valid URL") from None
        return text


def validate(raw: Mapping[str, Any]) -> IntakeResult[ListingPayload]:
    """Validate a raw listing submission.

    On success the payload has no id or timestamp; the store assigns both,
    and substitutes the placeholder image when ``image_url`` is empty.
    """
    try:
        form = ListingForm.model_validate(dict(raw))
    except ValidationError as exc:
        errors = collect_errors(exc, ListingForm)
        logger.info("Listing rejected, invalid fields: %s", ", ".join(sorted(errors)))
        return IntakeResult[ListingPayload](errors=errors)
    return IntakeResult[ListingPayload](payload=ListingPayload(**form.model_dump()))
