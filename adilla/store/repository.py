"""Store client for listings and bookings."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from adilla.config import AppConfig, PLACEHOLDER_IMAGE_URL
from adilla.errors import StoreUnavailable
from adilla.models import Booking, BookingPayload, Listing, ListingPayload
from adilla.store.feed import SnapshotFeed, Unsubscribe
from adilla.store.tables import BookingRow, ListingRow, init_db, new_document_id

logger = logging.getLogger(__name__)


def _listing_from_row(row: ListingRow) -> Listing:
    return Listing(
        id=row.doc_id,
        name=row.name,
        address=row.address,
        property_type=row.property_type,
        location=row.location,
        price=row.price,
        bedrooms=row.bedrooms,
        bathrooms=row.bathrooms,
        square_footage=row.square_footage,
        amenities=row.amenities if isinstance(row.amenities, list) else [],
        unique_features=row.unique_features if isinstance(row.unique_features, list) else [],
        description=row.description or "",
        image_url=row.image_url or "",
        date_added=row.date_added,
    )


def _booking_from_row(row: BookingRow) -> Booking:
    return Booking(
        id=row.doc_id,
        property_id=row.property_id,
        property_name=row.property_name,
        user_name=row.user_name,
        user_phone=row.user_phone,
        booking_date=row.booking_date,
    )


class Store:
    """Handles all listing and booking persistence.

    Construct it explicitly and call ``connect()`` before use. A store that
    failed to connect stays usable as an object: reads and subscriptions
    yield empty snapshots, writes raise StoreUnavailable.
    """

    def __init__(
        self,
        db_url: str = "sqlite:///adilla.db",
        placeholder_image_url: str = PLACEHOLDER_IMAGE_URL,
        echo: bool = False,
    ):
        self.db_url = db_url
        self.placeholder_image_url = placeholder_image_url
        self.echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None
        self.listings_feed: SnapshotFeed[Listing] = SnapshotFeed("listings", self.list_listings)
        self.bookings_feed: SnapshotFeed[Booking] = SnapshotFeed("bookings", self.list_bookings)

    @classmethod
    def from_config(cls, cfg: AppConfig) -> "Store":
        return cls(
            cfg.database.url,
            placeholder_image_url=cfg.intake.placeholder_image_url,
            echo=cfg.database.echo,
        )

    @property
    def connected(self) -> bool:
        return self._session_factory is not None

    def connect(self) -> bool:
        """Open the database. Returns False (and logs) if it cannot."""
        if self.connected:
            return True
        try:
            engine = init_db(self.db_url, echo=self.echo)
        except SQLAlchemyError as e:
            logger.error("Could not connect to store at %s: %s", self.db_url, e)
            return False
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine)
        logger.info("Store connected: %s", self.db_url)
        return True

    def close(self) -> None:
        self.listings_feed.clear()
        self.bookings_feed.clear()
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Store closed: %s", self.db_url)
        self._engine = None
        self._session_factory = None

    def __enter__(self) -> "Store":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _session(self) -> Session:
        if self._session_factory is None:
            raise StoreUnavailable("Store is not connected")
        return self._session_factory()

    # -- writes --

    def insert_listing(self, payload: ListingPayload) -> Listing:
        """Store a validated listing; assigns id, timestamp and image fallback."""
        data = payload.model_dump()
        data["image_url"] = data["image_url"] or self.placeholder_image_url
        added = datetime.now(timezone.utc)
        row = ListingRow(doc_id=new_document_id(), date_added=added, **data)
        try:
            with self._session() as session:
                session.add(row)
                session.commit()
                listing = _listing_from_row(row)
        except SQLAlchemyError as e:
            logger.error("Failed to insert listing %r: %s", payload.name, e)
            raise StoreUnavailable(f"Failed to insert listing: {e}") from e

        logger.info("Listing %s added (%s, %s)", listing.id, listing.name, listing.location)
        self.listings_feed.publish()
        return listing

    def insert_booking(self, payload: BookingPayload) -> Booking:
        """Store a validated booking; assigns id and booking timestamp."""
        row = BookingRow(
            doc_id=new_document_id(),
            booking_date=datetime.now(timezone.utc),
            **payload.model_dump(),
        )
        try:
            with self._session() as session:
                session.add(row)
                session.commit()
                booking = _booking_from_row(row)
        except SQLAlchemyError as e:
            logger.error("Failed to insert booking for %s: %s", payload.property_id, e)
            raise StoreUnavailable(f"Failed to insert booking: {e}") from e

        logger.info("Booking %s added for property %s", booking.id, booking.property_id)
        self.bookings_feed.publish()
        return booking

    # -- reads --

    def list_listings(self) -> list[Listing]:
        """All listings, newest first."""
        try:
            with self._session() as session:
                rows = (
                    session.query(ListingRow)
                    .order_by(ListingRow.date_added.desc(), ListingRow.pk.desc())
                    .all()
                )
                return [_listing_from_row(r) for r in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to read listings: {e}") from e

    def list_bookings(self) -> list[Booking]:
        """All bookings, newest first."""
        try:
            with self._session() as session:
                rows = (
                    session.query(BookingRow)
                    .order_by(BookingRow.booking_date.desc(), BookingRow.pk.desc())
                    .all()
                )
                return [_booking_from_row(r) for r in rows]
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to read bookings: {e}") from e

    def get_listing(self, listing_id: str) -> Listing | None:
        try:
            with self._session() as session:
                row = session.query(ListingRow).filter_by(doc_id=listing_id).first()
                return _listing_from_row(row) if row else None
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to read listing {listing_id}: {e}") from e

    # -- live snapshots --

    def subscribe_listings(self, callback: Callable[[list[Listing]], None]) -> Unsubscribe:
        return self.listings_feed.subscribe(callback)

    def subscribe_bookings(self, callback: Callable[[list[Booking]], None]) -> Unsubscribe:
        return self.bookings_feed.subscribe(callback)
