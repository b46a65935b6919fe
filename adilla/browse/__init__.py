"""Listing browse pipeline: filtering, sorting and view state."""

from adilla.browse.engine import apply, available_locations, default_spec, location_choices
from adilla.browse.params import spec_from_params
from adilla.browse.session import BrowseSession
