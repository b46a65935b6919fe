"""Persistence for listings and bookings, with live snapshot feeds."""

from adilla.store.feed import SnapshotFeed
from adilla.store.repository import Store
