"""Data models for Adilla."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from adilla.errors import IntakeValidationError

PayloadT = TypeVar("PayloadT")


class MarketModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything the store writes is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SortField(str, Enum):
    PRICE = "price"
    DATE_ADDED = "dateAdded"
    BEDROOMS = "bedrooms"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ListingPayload(MarketModel):
    """A validated listing that has not been stored yet."""

    name: str
    address: str
    property_type: str
    location: str
    price: float
    bedrooms: float
    bathrooms: float
    square_footage: float
    amenities: list[str] = Field(default_factory=list)
    unique_features: list[str] = Field(default_factory=list)
    description: str
    image_url: str = ""


class Listing(ListingPayload):
    """A property listing as held by the store."""

    id: str
    date_added: datetime

    @field_validator("date_added")
    @classmethod
    def _normalize_date_added(cls, value: datetime) -> datetime:
        return _as_utc(value)


class BookingPayload(MarketModel):
    """A validated booking request that has not been stored yet."""

    property_id: str
    property_name: str
    user_name: str
    user_phone: str


class Booking(BookingPayload):
    """A booking request as held by the store."""

    id: str
    booking_date: datetime

    @field_validator("booking_date")
    @classmethod
    def _normalize_booking_date(cls, value: datetime) -> datetime:
        return _as_utc(value)


class FilterSortSpec(MarketModel):
    """Filter and sort choices for one browse view.

    ``location=None`` means all locations. Any other value, including an
    empty string, is matched exactly.
    """

    price_min: Optional[float] = None
    price_max: Optional[float] = None
    location: Optional[str] = None
    bedrooms_min: Optional[float] = None
    sort_field: SortField = SortField.DATE_ADDED
    sort_order: SortOrder = SortOrder.DESC


class DescriptionRequest(MarketModel):
    """Listing attributes sent to the description generator."""

    property_type: str
    location: str
    bedrooms: float
    bathrooms: float
    square_footage: float
    amenities: str = ""  # comma separated
    unique_features: str = ""  # comma separated

    @field_validator("amenities", "unique_features", mode="before")
    @classmethod
    def _join_tags(cls, value):
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value)
        return value


class GenerationResult(MarketModel):
    description: Optional[str] = None
    error: Optional[str] = None


class IntakeResult(BaseModel, Generic[PayloadT]):
    """Outcome of validating raw user input."""

    payload: Optional[PayloadT] = None
    errors: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.payload is not None and not self.errors

    def unwrap(self) -> PayloadT:
        if not self.ok:
            raise IntakeValidationError(self.errors)
        return self.payload


class ActionResult(MarketModel):
    """Structured result of a submit action, ready for display."""

    success: bool
    message: str
    errors: Optional[dict[str, list[str]]] = None
    listing: Optional[Listing] = None
    booking: Optional[Booking] = None
