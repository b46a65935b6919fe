"""Submit actions: validate, persist or generate, and report a structured result.

These are the only entry points the presentation layer uses for writes.
Errors are recovered here and turned into messages for display.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from adilla.describe.generator import DescriptionGenerator
from adilla.errors import GenerationFailure, IntakeValidationError, StoreUnavailable
from adilla.intake import booking as booking_intake
from adilla.intake import listing as listing_intake
from adilla.models import ActionResult, DescriptionRequest, GenerationResult
from adilla.store.repository import Store

logger = logging.getLogger(__name__)

LISTING_ADDED = "Property added successfully!"
LISTING_INVALID = "Failed to add property due to validation errors."
LISTING_STORE_ERROR = "Database Error: Failed to add property."
BOOKING_CREATED = "Booking created successfully!"
BOOKING_INVALID = "Failed to create booking due to validation errors."
BOOKING_STORE_ERROR = "Database Error: Failed to create booking."
GENERATION_ERROR = "Failed to generate description. Please try again."


def add_listing(store: Store, raw: Mapping[str, Any]) -> ActionResult:
    """Validate and store a new listing.

    Subscribers to the store's listing feed see the new listing; callers
    should not re-fetch.
    """
    try:
        payload = listing_intake.validate(raw).unwrap()
    except IntakeValidationError as e:
        return ActionResult(success=False, message=LISTING_INVALID, errors=e.errors)

    try:
        listing = store.insert_listing(payload)
    except StoreUnavailable as e:
        logger.error("Failed to add property: %s", e)
        return ActionResult(success=False, message=LISTING_STORE_ERROR)

    return ActionResult(success=True, message=LISTING_ADDED, listing=listing)


def create_booking(store: Store, raw: Mapping[str, Any]) -> ActionResult:
    """Validate and store a booking request."""
    try:
        payload = booking_intake.validate(raw).unwrap()
    except IntakeValidationError as e:
        return ActionResult(success=False, message=BOOKING_INVALID, errors=e.errors)

    try:
        booking = store.insert_booking(payload)
    except StoreUnavailable as e:
        logger.error("Failed to create booking: %s", e)
        return ActionResult(success=False, message=BOOKING_STORE_ERROR)

    return ActionResult(success=True, message=BOOKING_CREATED, booking=booking)


async def generate_description(
    generator: DescriptionGenerator, request: DescriptionRequest
) -> GenerationResult:
    try:
        description = await generator.generate(request)
    except GenerationFailure as e:
        logger.error("AI description generation failed: %s", e)
        return GenerationResult(error=GENERATION_ERROR)
    return GenerationResult(description=description)
