"""CLI interface for Adilla."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adilla.config import load_config
from adilla.models import Booking, DescriptionRequest, Listing

app = typer.Typer(
    name="adilla",
    help="Adilla - property listings, bookings and AI descriptions.",
    no_args_is_help=True,
)
console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _open_store(config_path: Path | None):
    from adilla.store.repository import Store

    cfg = load_config(config_path)
    store = Store.from_config(cfg)
    if not store.connect():
        console.print(f"[red]Could not open the store at {cfg.database.url}[/red]")
        raise typer.Exit(code=1)
    return cfg, store


def _print_errors(errors: dict[str, list[str]]) -> None:
    table = Table(title="Validation errors", show_header=True)
    table.add_column("Field", style="bold")
    table.add_column("Problem", style="red")
    for field, messages in errors.items():
        for message in messages:
            table.add_row(field, message)
    console.print(table)


def _display_listings_table(listings: list[Listing], title: str = "Listings") -> None:
    table = Table(title=title, show_lines=True)
    table.add_column("#", style="dim", width=3)
    table.add_column("Name", style="bold")
    table.add_column("Location", style="cyan")
    table.add_column("Type", style="white")
    table.add_column("Price", style="green")
    table.add_column("Bed/Bath", style="white")
    table.add_column("Sqft", style="white")
    table.add_column("Added", style="dim")
    table.add_column("ID", style="dim")

    for i, listing in enumerate(listings, 1):
        table.add_row(
            str(i),
            listing.name[:35],
            listing.location,
            listing.property_type,
            f"${listing.price:,.0f}",
            f"{listing.bedrooms:g}/{listing.bathrooms:g}",
            f"{listing.square_footage:,.0f}",
            listing.date_added.strftime("%Y-%m-%d %H:%M"),
            listing.id,
        )

    console.print(table)


def _display_bookings_table(bookings: list[Booking]) -> None:
    table = Table(title="Incoming Bookings", show_lines=True)
    table.add_column("Property", style="bold")
    table.add_column("Name", style="white")
    table.add_column("Phone", style="cyan")
    table.add_column("Requested", style="dim")

    for booking in bookings:
        table.add_row(
            booking.property_name,
            booking.user_name,
            booking.user_phone,
            booking.booking_date.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def listings(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config TOML file"),
    price_min: str = typer.Option(None, "--min-price", help="Minimum price"),
    price_max: str = typer.Option(None, "--max-price", help="Maximum price"),
    location: str = typer.Option(None, "--location", "-l", help="Exact location"),
    bedrooms_min: str = typer.Option(None, "--min-beds", help="Minimum bedrooms"),
    sort_by: str = typer.Option("dateAdded_desc", "--sort", "-s", help="e.g. price_asc, bedrooms_desc"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Browse listings with filters and sorting."""
    from adilla.browse.session import BrowseSession

    setup_logging(verbose)
    _, store = _open_store(config_path)
    session = BrowseSession()
    unsubscribe = session.attach(store)
    try:
        visible = session.apply_params(
            {
                "priceMin": price_min,
                "priceMax": price_max,
                "location": location,
                "bedroomsMin": bedrooms_min,
                "sortBy": sort_by,
            }
        )
    finally:
        unsubscribe()
        store.close()

    if not visible:
        console.print("[yellow]No properties found matching your criteria.[/yellow]")
        return

    console.print(f"[bold]Showing {len(visible)} of {len(session.listings)} listings[/bold]\n")
    _display_listings_table(visible)


@app.command()
def locations(
    config_path: Path = typer.Option(None, "--config", "-c"),
):
    """List the locations that currently have listings."""
    from adilla.browse.engine import location_choices

    _, store = _open_store(config_path)
    try:
        current = store.list_listings()
    finally:
        store.close()

    for name in location_choices(current):
        console.print(name)


@app.command()
def describe(
    property_type: str = typer.Option(..., "--type", "-t", help="e.g. Apartment, House"),
    location: str = typer.Option(..., "--location", "-l"),
    bedrooms: float = typer.Option(..., "--beds"),
    bathrooms: float = typer.Option(..., "--baths"),
    square_footage: float = typer.Option(..., "--sqft"),
    amenities: str = typer.Option("", "--amenities", help="Comma separated"),
    unique_features: str = typer.Option("", "--features", help="Comma separated"),
    config_path: Path = typer.Option(None, "--config", "-c"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Generate a marketing description for a property."""
    setup_logging(verbose)
    cfg = load_config(config_path)
    request = DescriptionRequest(
        property_type=property_type,
        location=location,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        square_footage=square_footage,
        amenities=amenities,
        unique_features=unique_features,
    )
    result = asyncio.run(_generate(cfg, request))
    if result.error:
        console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(code=1)
    console.print(Panel(result.description, title=f"{property_type} in {location}"))


async def _generate(cfg, request: DescriptionRequest):
    from adilla.actions import generate_description
    from adilla.describe.generator import DescriptionGenerator

    generator = DescriptionGenerator(cfg.generator)
    try:
        return await generate_description(generator, request)
    finally:
        await generator.close()


@app.command("add-listing")
def add_listing(
    name: str = typer.Option(..., "--name", "-n"),
    address: str = typer.Option(..., "--address", "-a"),
    property_type: str = typer.Option(..., "--type", "-t"),
    location: str = typer.Option(..., "--location", "-l"),
    price: str = typer.Option(..., "--price", "-p"),
    bedrooms: str = typer.Option(..., "--beds"),
    bathrooms: str = typer.Option(..., "--baths"),
    square_footage: str = typer.Option(..., "--sqft"),
    amenities: str = typer.Option("", "--amenities", help="Comma separated"),
    unique_features: str = typer.Option("", "--features", help="Comma separated"),
    description: str = typer.Option("", "--description", "-d"),
    image_url: str = typer.Option("", "--image-url"),
    generate: bool = typer.Option(False, "--generate", "-g", help="Write the description with AI"),
    config_path: Path = typer.Option(None, "--config", "-c"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Add a property listing."""
    from adilla.actions import add_listing as add_listing_action
    from adilla.intake.common import coerce_number

    setup_logging(verbose)
    cfg, store = _open_store(config_path)

    if generate:
        try:
            request = DescriptionRequest(
                property_type=property_type,
                location=location,
                bedrooms=coerce_number(bedrooms, "Bedrooms"),
                bathrooms=coerce_number(bathrooms, "Bathrooms"),
                square_footage=coerce_number(square_footage, "Square footage"),
                amenities=amenities,
                unique_features=unique_features,
            )
        except ValueError as e:
            console.print(f"[red]Cannot generate a description: {e}[/red]")
            store.close()
            raise typer.Exit(code=1)
        generated = asyncio.run(_generate(cfg, request))
        if generated.error:
            console.print(f"[yellow]{generated.error} Keeping the given description.[/yellow]")
        else:
            description = generated.description

    raw = {
        "name": name,
        "address": address,
        "propertyType": property_type,
        "location": location,
        "price": price,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "squareFootage": square_footage,
        "amenities": amenities,
        "uniqueFeatures": unique_features,
        "description": description,
        "imageUrl": image_url,
    }
    try:
        result = add_listing_action(store, raw)
    finally:
        store.close()

    if not result.success:
        console.print(f"[red]{result.message}[/red]")
        if result.errors:
            _print_errors(result.errors)
            raise typer.Exit(code=2)
        raise typer.Exit(code=1)

    console.print(f"[green]{result.message}[/green]")
    _display_listings_table([result.listing], title="New listing")


@app.command()
def book(
    property_id: str = typer.Argument(..., help="Listing ID"),
    user_name: str = typer.Option(..., "--name", "-n", help="Your full name"),
    user_phone: str = typer.Option(..., "--phone", "-p", help="Your phone number"),
    config_path: Path = typer.Option(None, "--config", "-c"),
):
    """Request a booking for a listing."""
    from adilla.actions import create_booking

    _, store = _open_store(config_path)
    try:
        listing = store.get_listing(property_id)
        if listing is None:
            console.print(f"[red]No listing with ID {property_id}[/red]")
            raise typer.Exit(code=1)
        result = create_booking(
            store,
            {
                "propertyId": listing.id,
                "propertyName": listing.name,
                "userName": user_name,
                "userPhone": user_phone,
            },
        )
    finally:
        store.close()

    if not result.success:
        console.print(f"[red]{result.message}[/red]")
        if result.errors:
            _print_errors(result.errors)
        raise typer.Exit(code=1)

    console.print(
        f"[green]{result.message}[/green] Your request for {listing.name} is in. "
        "We will contact you to confirm."
    )


@app.command()
def bookings(
    config_path: Path = typer.Option(None, "--config", "-c"),
):
    """Show incoming booking requests, newest first."""
    _, store = _open_store(config_path)
    try:
        received = store.list_bookings()
    finally:
        store.close()

    if not received:
        console.print("[yellow]No bookings yet.[/yellow]")
        return
    _display_bookings_table(received)


@app.command()
def config_show(
    config_path: Path = typer.Option(None, "--config", "-c"),
):
    """Display current configuration."""
    cfg = load_config(config_path)
    console.print_json(json.dumps(cfg.public_dump(), indent=2, default=str))


@app.command()
def serve(
    config_path: Path = typer.Option(None, "--config", "-c"),
    host: str = typer.Option(None, "--host"),
    port: int = typer.Option(None, "--port"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Start the API server."""
    import uvicorn

    setup_logging(verbose)
    cfg = load_config(config_path)

    from adilla.api.server import create_app

    web_app = create_app(cfg)
    host = host or cfg.server.host
    port = port or cfg.server.port
    console.print(f"[bold]Starting Adilla at http://{host}:{port}[/bold]")
    uvicorn.run(web_app, host=host, port=port)


if __name__ == "__main__":
    app()
