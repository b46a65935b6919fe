"""FastAPI service for browsing listings, submitting bookings and admin review."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable

from fastapi import Body, FastAPI, Query, Response, WebSocket

from adilla import actions
from adilla.browse.engine import apply
from adilla.browse.params import spec_from_params
from adilla.browse.session import BrowseSession
from adilla.config import AppConfig
from adilla.describe.generator import DescriptionGenerator
from adilla.models import ActionResult, Booking, DescriptionRequest, MarketModel
from adilla.store.repository import Store

logger = logging.getLogger(__name__)


def _dump(items: list[MarketModel]) -> list[dict]:
    return [item.to_json() for item in items]


def _status_for(result: ActionResult) -> int:
    if result.success:
        return 201
    if result.errors:
        return 422
    return 503


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _stream_snapshots(websocket: WebSocket, subscribe: Callable) -> None:
    """Push every snapshot from a store feed to one websocket client."""
    await websocket.accept()
    queue: asyncio.Queue[list[MarketModel]] = asyncio.Queue()
    unsubscribe = subscribe(queue.put_nowait)
    disconnected = asyncio.ensure_future(_wait_for_disconnect(websocket))
    try:
        while True:
            getter = asyncio.ensure_future(queue.get())
            await asyncio.wait({getter, disconnected}, return_when=asyncio.FIRST_COMPLETED)
            if disconnected.done():
                getter.cancel()
                break
            await websocket.send_json(_dump(getter.result()))
    finally:
        unsubscribe()
        disconnected.cancel()


def create_app(
    cfg: AppConfig,
    store: Store | None = None,
    generator: DescriptionGenerator | None = None,
) -> FastAPI:
    store = store or Store.from_config(cfg)
    generator = generator or DescriptionGenerator(cfg.generator)
    catalog = BrowseSession()
    bookings: list[Booking] = []
    unsubscribers: list[Callable[[], None]] = []

    def _on_bookings(items: list[Booking]) -> None:
        bookings[:] = items

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not store.connect():
            logger.warning("Starting without a store; listings will be empty")
        unsubscribers.append(catalog.attach(store))
        unsubscribers.append(store.subscribe_bookings(_on_bookings))
        yield
        for unsubscribe in unsubscribers:
            unsubscribe()
        unsubscribers.clear()
        await generator.close()
        store.close()

    app = FastAPI(title="Adilla", version="0.1.0", lifespan=lifespan)

    @app.get("/api/listings")
    async def get_listings(
        price_min: str = Query(None, alias="priceMin"),
        price_max: str = Query(None, alias="priceMax"),
        location: str = Query(None),
        bedrooms_min: str = Query(None, alias="bedroomsMin"),
        sort_by: str = Query(None, alias="sortBy", description="e.g. price_asc, dateAdded_desc"),
        sort_field: str = Query(None, alias="sortField"),
        sort_order: str = Query(None, alias="sortOrder"),
    ):
        """Filtered and sorted view of the live listing snapshot."""
        spec = spec_from_params(
            {
                "priceMin": price_min,
                "priceMax": price_max,
                "location": location,
                "bedroomsMin": bedrooms_min,
                "sortBy": sort_by,
                "sortField": sort_field,
                "sortOrder": sort_order,
            }
        )
        current = catalog.listings
        listings = apply(current, spec)
        return {
            "total": len(current),
            "count": len(listings),
            "spec": spec.to_json(),
            "locations": catalog.locations,
            "listings": _dump(listings),
        }

    @app.get("/api/locations")
    async def get_locations():
        return {"locations": catalog.locations}

    @app.post("/api/listings")
    async def add_listing(response: Response, raw: dict[str, Any] = Body(...)):
        """Validate and store a new listing."""
        result = actions.add_listing(store, raw)
        response.status_code = _status_for(result)
        return result.to_json()

    @app.post("/api/bookings")
    async def create_booking(response: Response, raw: dict[str, Any] = Body(...)):
        """Submit a booking request for a listing."""
        result = actions.create_booking(store, raw)
        response.status_code = _status_for(result)
        return result.to_json()

    @app.get("/api/bookings")
    async def get_bookings():
        """Incoming bookings, newest first."""
        return {"count": len(bookings), "bookings": _dump(bookings)}

    @app.post("/api/descriptions")
    async def generate_description(request: DescriptionRequest, response: Response):
        """Generate marketing copy from listing attributes."""
        result = await actions.generate_description(generator, request)
        if result.error:
            response.status_code = 502
        return result.to_json()

    @app.websocket("/ws/listings")
    async def listings_feed(websocket: WebSocket):
        await _stream_snapshots(websocket, store.subscribe_listings)

    @app.websocket("/ws/bookings")
    async def bookings_feed(websocket: WebSocket):
        await _stream_snapshots(websocket, store.subscribe_bookings)

    @app.get("/api/config")
    async def get_config():
        """Return current configuration with secrets masked."""
        return cfg.public_dump()

    return app
