"""Browse state for one listing view: current snapshot plus filter choices."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence

from adilla.browse.engine import apply, default_spec, location_choices
from adilla.browse.params import spec_from_params
from adilla.models import FilterSortSpec, Listing

logger = logging.getLogger(__name__)


class BrowseSession:
    """Keeps the displayed listings in step with the store and the filters.

    The visible list is always ``apply(listings, spec)``; snapshots, filter
    changes and resets all recompute it the same way.
    """

    def __init__(self, spec: FilterSortSpec | None = None):
        self.spec = spec or default_spec()
        self._listings: list[Listing] = []
        self.locations: list[str] = []
        self.visible: list[Listing] = []

    @property
    def listings(self) -> list[Listing]:
        return list(self._listings)

    def attach(self, store) -> Callable[[], None]:
        """Follow the store's live listing feed. Returns the unsubscribe."""
        return store.subscribe_listings(self.on_snapshot)

    def on_snapshot(self, listings: Sequence[Listing]) -> None:
        self._listings = list(listings)
        self.locations = location_choices(self._listings)
        logger.debug("Snapshot received: %d listings", len(self._listings))
        self._refresh()

    def set_spec(self, spec: FilterSortSpec) -> list[Listing]:
        self.spec = spec
        return self._refresh()

    def apply_params(self, params: Mapping[str, Any]) -> list[Listing]:
        return self.set_spec(spec_from_params(params))

    def reset(self) -> list[Listing]:
        return self.set_spec(default_spec())

    def _refresh(self) -> list[Listing]:
        self.visible = apply(self._listings, self.spec)
        return self.visible
