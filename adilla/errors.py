"""Error types raised across Adilla."""

from __future__ import annotations


class AdillaError(Exception):
    """Base exception for Adilla."""


class IntakeValidationError(AdillaError):
    """Raw input failed validation.

    ``errors`` maps each failing field to one or more messages.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        fields = ", ".join(sorted(errors)) or "unknown"
        super().__init__(f"Validation failed for: {fields}")


class StoreUnavailable(AdillaError):
    """The listing/booking store cannot be reached or rejected a write."""


class GenerationFailure(AdillaError):
    """The description generator failed or returned nothing."""
