"""Filter/sort engine for listing views.

Everything here is a pure function of its inputs: the full listing set as
currently known and a FilterSortSpec. Inputs are never mutated.
"""

from __future__ import annotations

import math
from typing import Callable, Iterable, Optional, Sequence

from adilla.models import FilterSortSpec, Listing, SortField, SortOrder


def default_spec() -> FilterSortSpec:
    """No filters, newest first."""
    return FilterSortSpec()


def _is_set(bound: Optional[float]) -> bool:
    return bound is not None and not math.isnan(bound)


def _price_key(listing: Listing) -> float:
    return listing.price


def _date_added_key(listing: Listing) -> float:
    return listing.date_added.timestamp()


def _bedrooms_key(listing: Listing) -> float:
    return listing.bedrooms


SORT_KEYS: dict[SortField, Callable[[Listing], float]] = {
    SortField.PRICE: _price_key,
    SortField.DATE_ADDED: _date_added_key,
    SortField.BEDROOMS: _bedrooms_key,
}


def matches(listing: Listing, spec: FilterSortSpec) -> bool:
    """Check a listing against every filter that is set."""
    if _is_set(spec.price_min) and listing.price < spec.price_min:
        return False
    if _is_set(spec.price_max) and listing.price > spec.price_max:
        return False
    if spec.location is not None and listing.location != spec.location:
        return False
    if _is_set(spec.bedrooms_min) and listing.bedrooms < spec.bedrooms_min:
        return False
    return True


def apply(listings: Sequence[Listing], spec: FilterSortSpec | None = None) -> list[Listing]:
    """Filter and sort listings for display.

    Filters combine with AND. The sort is stable in both directions, so
    listings with equal keys keep their input order.
    """
    spec = spec or default_spec()
    filtered = [listing for listing in listings if matches(listing, spec)]
    key = SORT_KEYS[spec.sort_field]
    return sorted(filtered, key=key, reverse=spec.sort_order is SortOrder.DESC)


def available_locations(listings: Iterable[Listing]) -> set[str]:
    """Distinct locations present in the listing set."""
    return {listing.location for listing in listings}


def location_choices(listings: Iterable[Listing]) -> list[str]:
    return sorted(available_locations(listings))
