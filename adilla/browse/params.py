"""Turn raw filter-form values into a FilterSortSpec."""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from adilla.models import FilterSortSpec, SortField, SortOrder

ALL_LOCATIONS = "__ALL_LOCATIONS__"

# Options offered by the browse form, keyed by their combined token.
SORT_OPTIONS: dict[str, str] = {
    "price_asc": "Price: Low to High",
    "price_desc": "Price: High to Low",
    "dateAdded_desc": "Newest First",
    "dateAdded_asc": "Oldest First",
    "bedrooms_asc": "Bedrooms: Low to High",
    "bedrooms_desc": "Bedrooms: High to Low",
}


def parse_number(value: Any) -> Optional[float]:
    """Parse a form number; anything blank or non-numeric counts as unset."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_location(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    if text == "" or text == ALL_LOCATIONS:
        return None
    return text


def parse_sort(
    sort_by: str | None = None,
    sort_field: str | None = None,
    sort_order: str | None = None,
) -> tuple[SortField, SortOrder]:
    """Resolve the sort from a combined token or separate field/order.

    Unrecognised values fall back to the default sort.
    """
    if sort_by:
        field_name, _, order_name = sort_by.rpartition("_")
        sort_field, sort_order = field_name, order_name
    try:
        field = SortField(sort_field) if sort_field else SortField.DATE_ADDED
        order = SortOrder(sort_order) if sort_order else SortOrder.DESC
    except ValueError:
        return SortField.DATE_ADDED, SortOrder.DESC
    return field, order


def _get(params: Mapping[str, Any], camel: str, snake: str) -> Any:
    if camel in params:
        return params[camel]
    return params.get(snake)


def spec_from_params(params: Mapping[str, Any]) -> FilterSortSpec:
    """Build a spec from query/form values in camelCase or snake_case."""
    field, order = parse_sort(
        sort_by=_get(params, "sortBy", "sort_by"),
        sort_field=_get(params, "sortField", "sort_field"),
        sort_order=_get(params, "sortOrder", "sort_order"),
    )
    return FilterSortSpec(
        price_min=parse_number(_get(params, "priceMin", "price_min")),
        price_max=parse_number(_get(params, "priceMax", "price_max")),
        location=parse_location(params.get("location")),
        bedrooms_min=parse_number(_get(params, "bedroomsMin", "bedrooms_min")),
        sort_field=field,
        sort_order=order,
    )


def sort_token(spec: FilterSortSpec) -> str:
    return f"{spec.sort_field.value}_{spec.sort_order.value}"
